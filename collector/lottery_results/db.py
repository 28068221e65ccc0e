"""Supabase データベース操作モジュール.

テーブル:
  - lottery_draws: 抽選回（抽選日ごとに 1 件）
  - prize_categories: 抽選回ごとの等級と賞金額
  - winning_numbers: 等級ごとの当選番号

スキーマは config.SUPABASE_SCHEMA。定義は collector/sql/schema.sql を参照。
"""

from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache

from supabase import Client, create_client

from lottery_results.config import SUPABASE_SCHEMA, SUPABASE_SECRET_KEY, SUPABASE_URL
from lottery_results.models import DrawInfo, DrawListing, PrizeCategory, TicketIdentifier
from lottery_results.parser import catalog_rank

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _client() -> Client:
    """Supabase クライアントを生成する（初回呼び出し時のみ）."""
    if not SUPABASE_URL or not SUPABASE_SECRET_KEY:
        raise RuntimeError("SUPABASE_URL / SUPABASE_SECRET_KEY が設定されていません")
    return create_client(SUPABASE_URL, SUPABASE_SECRET_KEY)


def _table(name: str):
    """対象スキーマのテーブルを参照する."""
    return _client().schema(SUPABASE_SCHEMA).table(name)


def _to_draw_info(row: dict) -> DrawInfo:
    """lottery_draws の行を DrawInfo にする."""
    return DrawInfo(
        id=row["id"],
        draw_date=row["draw_date"],
        lottery_name=row["lottery_name"],
        draw_no=row["draw_no"],
        pdf_url=row.get("pdf_url"),
    )


def draw_exists(draw_date: str) -> bool:
    """指定日の抽選回が保存済みか."""
    resp = _table("lottery_draws").select("id").eq("draw_date", draw_date).execute()
    return bool(resp.data)


def get_draw_by_date(draw_date: str) -> DrawInfo | None:
    """指定日の抽選回を取得する. 無ければ None."""
    resp = (
        _table("lottery_draws")
        .select("id, draw_date, lottery_name, draw_no, pdf_url")
        .eq("draw_date", draw_date)
        .limit(1)
        .execute()
    )
    if not resp.data:
        return None
    return _to_draw_info(resp.data[0])


def list_recent_draws(limit: int = 30) -> list[DrawInfo]:
    """保存済みの抽選回を新しい順に取得する."""
    resp = (
        _table("lottery_draws")
        .select("id, draw_date, lottery_name, draw_no, pdf_url")
        .order("draw_date", desc=True)
        .limit(limit)
        .execute()
    )
    return [_to_draw_info(row) for row in resp.data]


def get_prize_categories(draw_id: str) -> list[PrizeCategory]:
    """抽選回の等級と当選番号を取得する.

    Returns:
        カタログ順（配当順）に並べた PrizeCategory リスト。
        照合時の同額タイブレークはこの順序に従う。
    """
    resp = (
        _table("prize_categories")
        .select("category_name, prize_amount, winning_numbers(ticket_number, series, number)")
        .eq("draw_id", draw_id)
        .execute()
    )

    categories = []
    for row in resp.data:
        tickets = tuple(
            TicketIdentifier(
                raw_text=wn["ticket_number"],
                series=wn.get("series"),
                number=wn["number"],
            )
            for wn in row.get("winning_numbers") or []
        )
        categories.append(PrizeCategory(
            name=row["category_name"],
            amount=Decimal(str(row["prize_amount"])),
            tickets=tickets,
        ))

    # sorted() は安定なので未知の等級は取得順のまま末尾に並ぶ
    return sorted(categories, key=lambda c: catalog_rank(c.name))


def insert_draw(
    listing: DrawListing,
    draw_no: str,
    pdf_url: str | None,
    categories: list[PrizeCategory],
) -> str:
    """抽選回・等級・当選番号を保存する.

    途中で失敗した場合は抽選回を削除して（等級・番号は CASCADE で消える）
    例外を再送出する。

    Returns:
        作成した lottery_draws.id
    """
    resp = (
        _table("lottery_draws")
        .insert({
            "draw_date": listing.date,
            "lottery_name": listing.name,
            "draw_no": draw_no,
            "pdf_url": pdf_url,
        })
        .execute()
    )
    draw_id = resp.data[0]["id"]

    try:
        for category in categories:
            cat_resp = (
                _table("prize_categories")
                .insert({
                    "draw_id": draw_id,
                    "category_name": category.name,
                    "prize_amount": str(category.amount),
                })
                .execute()
            )
            category_id = cat_resp.data[0]["id"]

            _table("winning_numbers").insert([
                {
                    "category_id": category_id,
                    "ticket_number": t.raw_text,
                    "series": t.series,
                    "number": t.number,
                }
                for t in category.tickets
            ]).execute()
    except Exception:
        logger.error("保存失敗のため抽選回を削除: draw_date=%s", listing.date)
        _table("lottery_draws").delete().eq("id", draw_id).execute()
        raise

    ticket_count = sum(len(c.tickets) for c in categories)
    logger.info(
        "lottery_draws に保存: draw_date=%s, 等級 %d 件, 当選番号 %d 件",
        listing.date, len(categories), ticket_count,
    )
    return draw_id
