"""データモデル定義."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PrizeDefinition:
    """等級カタログの1エントリ."""

    name: str  # 正規化後の等級名 (例: "1st Prize")
    markers: tuple[str, ...]  # PDF テキスト上の見出し文字列
    has_series: bool  # 当選番号に 2 文字のシリーズが付くか


@dataclass(frozen=True)
class TicketIdentifier:
    """当選番号 1 件."""

    raw_text: str  # 表記 (例: "DF 869610", "0456")
    series: str | None  # 2 文字の英大文字、無ければ None
    number: str  # 数字列


@dataclass(frozen=True)
class PrizeCategory:
    """抽出済みの等級 1 件."""

    name: str
    amount: Decimal
    tickets: tuple[TicketIdentifier, ...]


@dataclass(frozen=True)
class Block:
    """見出しから次の見出しまでのテキスト区間."""

    definition: PrizeDefinition
    marker: str  # 実際にヒットした見出し文字列
    start: int
    end: int
    text: str


@dataclass
class DrawListing:
    """結果一覧ページの 1 行."""

    name: str  # 宝くじ名 (例: "KARUNYA PLUS KN-123")
    date: str  # ISO 8601 (YYYY-MM-DD)
    url: str  # 結果 PDF の URL


@dataclass
class DrawInfo:
    """DB に保存済みの抽選回."""

    id: str  # uuid
    draw_date: str  # ISO 8601
    lottery_name: str
    draw_no: str
    pdf_url: str | None = None


@dataclass(frozen=True)
class MatchQuery:
    """照合に使う正規化済みチケット."""

    series: str | None
    number: str


class MatchStatus(str, enum.Enum):
    """照合結果の種別."""

    NO_DRAW = "NO_DRAW"
    WIN = "WIN"
    NO_WIN = "NO_WIN"


@dataclass
class MatchResult:
    """照合結果.

    WIN のときのみ category / ticket が入る。NO_DRAW のときは draw も None。
    """

    status: MatchStatus
    draw: DrawInfo | None = None
    category: PrizeCategory | None = None
    ticket: TicketIdentifier | None = None

    @property
    def is_winner(self) -> bool:
        """当選かどうか."""
        return self.status is MatchStatus.WIN
