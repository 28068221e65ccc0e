"""チケット文字列の正規化.

抽出側（PDF テキスト）と照合側（ユーザー入力）の双方がこのルールを通す。
"""

from __future__ import annotations

import re

from lottery_results.errors import TicketFormatError
from lottery_results.models import TicketIdentifier

_WHITESPACE = re.compile(r"\s+")
_TICKET_PATTERN = re.compile(r"^([A-Z]{0,2})(\d+)$")
SERIES_LENGTH = 2


def split_ticket(raw: str) -> tuple[str | None, str]:
    """チケット文字列を (series, number) に分解する.

    空白を除去し英字を大文字化したうえで「英大文字 0〜2 文字 + 数字 1 文字以上」
    に一致するものだけを受け付ける。

    Args:
        raw: "df 869610", "DF869610", "0456" など

    Returns:
        (series, number) のタプル。英字が無ければ series は None。

    Raises:
        TicketFormatError: 形式に一致しない場合
    """
    clean = _WHITESPACE.sub("", raw or "").upper()
    m = _TICKET_PATTERN.match(clean)
    if not m:
        raise TicketFormatError(f"チケット番号の形式が不正です: {raw!r}", ticket=raw)
    return m.group(1) or None, m.group(2)


def normalize_ticket(raw: str) -> TicketIdentifier:
    """当選番号の表記を TicketIdentifier にする.

    シリーズは 2 文字ちょうどのみ。1 文字のシリーズは split_ticket では通るが
    当選番号としては不正なので弾く。

    Raises:
        TicketFormatError: 形式に一致しない、またはシリーズが 1 文字の場合
    """
    series, number = split_ticket(raw)
    if series is not None and len(series) != SERIES_LENGTH:
        raise TicketFormatError(f"シリーズは英字 2 文字です: {raw!r}", ticket=raw)
    return TicketIdentifier(raw_text=(raw or "").strip(), series=series, number=number)


def render_ticket(series: str | None, number: str) -> str:
    """保存・表示用の表記 ("DF 869610" / "0456") を返す."""
    return f"{series} {number}" if series else number
