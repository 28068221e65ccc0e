"""結果 PDF テキストの解析モジュール.

処理フロー:
  1. 等級見出し（またはフッター）の出現位置でテキストをブロックに区切る
  2. ブロックの見出し行から賞金額を取得
  3. 見出し行を除いた本文から当選番号を抽出
     - シリーズ付き等級: "DF 869610" 形式
     - シリーズ無し等級: 数字列を 4 桁ずつ区切る (例: 038304630500)

書式の揺れは前提とし、解析できないブロックはエラーにせず読み飛ばす。
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from functools import lru_cache

from lottery_results.models import Block, PrizeCategory, PrizeDefinition, TicketIdentifier
from lottery_results.normalize import normalize_ticket, render_ticket

logger = logging.getLogger(__name__)

# 配当順（カタログ順 = 照合時の候補順）
PRIZE_CATALOG: tuple[PrizeDefinition, ...] = (
    PrizeDefinition("1st Prize", ("1st Prize",), has_series=True),
    PrizeDefinition("Consolation", ("Cons Prize", "Consolation Prize"), has_series=True),
    PrizeDefinition("2nd Prize", ("2nd Prize",), has_series=True),
    PrizeDefinition("3rd Prize", ("3rd Prize",), has_series=True),
    PrizeDefinition("4th Prize", ("4th Prize",), has_series=False),
    PrizeDefinition("5th Prize", ("5th Prize",), has_series=False),
    PrizeDefinition("6th Prize", ("6th Prize",), has_series=False),
    PrizeDefinition("7th Prize", ("7th Prize",), has_series=False),
    PrizeDefinition("8th Prize", ("8th Prize",), has_series=False),
    PrizeDefinition("9th Prize", ("9th Prize",), has_series=False),
    PrizeDefinition("10th Prize", ("10th Prize",), has_series=False),
)

# これ以降に等級は無い
FOOTER_MARKERS: tuple[str, ...] = ("The prize winners are advised",)

SERIES_TICKET_PATTERN = re.compile(r"([A-Z]{2})\s*(\d{6})")
_DIGIT_RUN = re.compile(r"\d+")
NUMBER_GROUP_SIZE = 4


@lru_cache(maxsize=None)
def _amount_pattern(definition: PrizeDefinition) -> re.Pattern[str]:
    """見出しと同じ行にある "Rs : 1,000" を拾う正規表現."""
    markers = "|".join(re.escape(m) for m in definition.markers)
    return re.compile(rf"(?:{markers}).*?Rs\s*:\s*([\d,]+)", re.IGNORECASE)


def _find_next_marker(
    text: str, pos: int, catalog: tuple[PrizeDefinition, ...]
) -> tuple[int, str, PrizeDefinition | None] | None:
    """pos 以降で最も早く現れる見出しを返す.

    Returns:
        (位置, 見出し文字列, 定義) のタプル。フッターの場合は定義が None。
        見つからなければ None。
    """
    best: tuple[int, str, PrizeDefinition | None] | None = None
    for definition in catalog:
        for marker in definition.markers:
            idx = text.find(marker, pos)
            if idx != -1 and (best is None or idx < best[0]):
                best = (idx, marker, definition)

    for footer in FOOTER_MARKERS:
        idx = text.find(footer, pos)
        if idx != -1 and (best is None or idx < best[0]):
            best = (idx, footer, None)

    return best


def segment_blocks(
    text: str, catalog: tuple[PrizeDefinition, ...] = PRIZE_CATALOG
) -> list[Block]:
    """テキストを等級ごとのブロックに区切る.

    ブロックは見出しの開始位置から次の見出し（フッター含む）の開始位置まで。
    見出しが重複・順不同でも「先に出現したものが勝つ」以上の補正はしない。
    """
    blocks: list[Block] = []
    marker = _find_next_marker(text, 0, catalog)
    while marker is not None:
        start, key, definition = marker
        nxt = _find_next_marker(text, start + len(key), catalog)
        end = nxt[0] if nxt is not None else len(text)
        if definition is not None:
            blocks.append(Block(
                definition=definition,
                marker=key,
                start=start,
                end=end,
                text=text[start:end],
            ))
        marker = nxt
    return blocks


def extract_amount(block_text: str, definition: PrizeDefinition) -> Decimal | None:
    """ブロックから賞金額を取得する. 取得できない・0 以下なら None."""
    m = _amount_pattern(definition).search(block_text)
    if not m:
        return None

    digits = m.group(1).replace(",", "")
    try:
        amount = Decimal(digits)
    except InvalidOperation:
        return None
    return amount if amount > 0 else None


def extract_tickets(block_text: str, has_series: bool) -> list[TicketIdentifier]:
    """ブロック本文から当選番号を抽出する（順序維持・重複除去）."""
    # 1 行目は見出し（等級名・金額）なので読まない
    content = "\n".join(block_text.split("\n")[1:])

    rendered: list[str] = []
    if has_series:
        for m in SERIES_TICKET_PATTERN.finditer(content):
            rendered.append(render_ticket(m.group(1), m.group(2)))
    else:
        # 区切り無しで連結された番号 (038304630500) を 4 桁ずつに分ける
        # 4 桁未満の数字列・末尾の余りはページ番号などとみなして捨てる
        for run in _DIGIT_RUN.findall(content):
            for i in range(0, len(run) - NUMBER_GROUP_SIZE + 1, NUMBER_GROUP_SIZE):
                rendered.append(run[i:i + NUMBER_GROUP_SIZE])

    return [normalize_ticket(t) for t in dict.fromkeys(rendered)]


def parse_block(block: Block) -> PrizeCategory | None:
    """1 ブロックを等級に変換する. 金額または番号が取れなければ None."""
    amount = extract_amount(block.text, block.definition)
    if amount is None:
        logger.debug("金額を取得できないためスキップ: %s", block.marker)
        return None

    tickets = extract_tickets(block.text, block.definition.has_series)
    if not tickets:
        logger.debug("当選番号が無いためスキップ: %s", block.marker)
        return None

    return PrizeCategory(name=block.definition.name, amount=amount, tickets=tuple(tickets))


def parse_result_text(
    text: str, catalog: tuple[PrizeDefinition, ...] = PRIZE_CATALOG
) -> list[PrizeCategory]:
    """結果 PDF のテキスト全体から等級リストを抽出する.

    見出しが一つも無ければ空リストを返す。空リストの扱い（取り込み失敗とするか）は
    呼び出し側が判断する。
    """
    categories: list[PrizeCategory] = []
    for block in segment_blocks(text, catalog):
        category = parse_block(block)
        if category is not None:
            categories.append(category)

    logger.debug("等級 %d 件を抽出", len(categories))
    return categories


def catalog_rank(name: str, catalog: tuple[PrizeDefinition, ...] = PRIZE_CATALOG) -> int:
    """等級名のカタログ順位を返す. 未知の等級は末尾扱い."""
    for i, definition in enumerate(catalog):
        if definition.name == name:
            return i
    return len(catalog)
