"""当選照合モジュール.

照合ルール（チケットごとに評価し、いずれかに該当すれば当選候補）:
  1. 完全一致: シリーズが両方にあって等しく、番号も等しい
  2. 番号一致: 番号が等しい（どちらかにシリーズが無い場合）
  3. 下 4 桁一致: 当選番号が入力番号より短く、下 4 桁が等しい

候補のうち賞金額が最大の等級を採用し、同額なら先に現れたものを優先する。
"""

from __future__ import annotations

from collections.abc import Iterable

from lottery_results.config import TICKET_NUMBER_MAX_LENGTH, TICKET_NUMBER_MIN_LENGTH
from lottery_results.errors import TicketLengthError
from lottery_results.models import (
    DrawInfo,
    MatchQuery,
    MatchResult,
    MatchStatus,
    PrizeCategory,
    TicketIdentifier,
)
from lottery_results.normalize import split_ticket

SUFFIX_LENGTH = 4


def build_query(
    raw: str,
    min_length: int = TICKET_NUMBER_MIN_LENGTH,
    max_length: int = TICKET_NUMBER_MAX_LENGTH,
) -> MatchQuery:
    """ユーザー入力を検証して MatchQuery にする.

    Raises:
        TicketFormatError: 形式不正
        TicketLengthError: 番号部の桁数が min_length〜max_length の範囲外
    """
    series, number = split_ticket(raw)
    if not min_length <= len(number) <= max_length:
        raise TicketLengthError(
            f"番号は {min_length}〜{max_length} 桁で入力してください: {raw!r}",
            ticket=raw,
        )
    return MatchQuery(series=series, number=number)


def is_exact_match(query: MatchQuery, ticket: TicketIdentifier) -> bool:
    """シリーズ・番号ともに一致するか."""
    return (
        query.series is not None
        and ticket.series is not None
        and query.series == ticket.series
        and query.number == ticket.number
    )


def is_number_match(query: MatchQuery, ticket: TicketIdentifier) -> bool:
    """番号が一致するか（シリーズはどちらかに無ければ不問）."""
    # 両方にシリーズがあって異なる場合は別チケット
    if query.series and ticket.series and query.series != ticket.series:
        return False
    return query.number == ticket.number


def is_suffix_match(query: MatchQuery, ticket: TicketIdentifier) -> bool:
    """「下 4 桁」型の等級との照合.

    当選番号側が入力番号より短い場合だけ対象にする。
    "9610" の入力は "DF 869610" と一致しない。
    """
    if query.series and ticket.series and query.series != ticket.series:
        return False
    if len(ticket.number) >= len(query.number):
        return False
    return query.number[-SUFFIX_LENGTH:] == ticket.number[-SUFFIX_LENGTH:]


def ticket_matches(query: MatchQuery, ticket: TicketIdentifier) -> bool:
    """いずれかの照合ルールに該当するか."""
    return (
        is_exact_match(query, ticket)
        or is_number_match(query, ticket)
        or is_suffix_match(query, ticket)
    )


def match_ticket(
    query: MatchQuery,
    categories: Iterable[PrizeCategory],
    draw: DrawInfo | None = None,
) -> MatchResult:
    """抽選回の全等級に対して照合する.

    Args:
        query: build_query() 済みの入力
        categories: 照合候補。この順序が同額時の優先順位になる（通常はカタログ順）
        draw: 結果に添える抽選回情報

    Returns:
        WIN（最高額の等級と一致した当選番号）または NO_WIN
    """
    best_category: PrizeCategory | None = None
    best_ticket: TicketIdentifier | None = None

    for category in categories:
        if best_category is not None and category.amount <= best_category.amount:
            continue
        for ticket in category.tickets:
            if ticket_matches(query, ticket):
                best_category, best_ticket = category, ticket
                break

    if best_category is None:
        return MatchResult(status=MatchStatus.NO_WIN, draw=draw)
    return MatchResult(
        status=MatchStatus.WIN,
        draw=draw,
        category=best_category,
        ticket=best_ticket,
    )
