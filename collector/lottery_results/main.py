"""ケララ州宝くじ結果取得・当選照合 — メインエントリーポイント.

取り込みの処理フロー:
  1. 結果一覧ページから抽選回のリストを取得
  2. 保存済みの抽選日はスキップ
  3. 結果 PDF をダウンロード・保存し、テキストを抽出
  4. テキストから等級・当選番号を解析
  5. DB に書き込み

照合:
  入力チケットを検証 → 抽選日の等級を DB から取得 → 照合
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from zoneinfo import ZoneInfo

from lottery_results.config import DRAW_TIMEZONE, LOG_DIR
from lottery_results.db import (
    draw_exists,
    get_draw_by_date,
    get_prize_categories,
    insert_draw,
    list_recent_draws,
)
from lottery_results.errors import TicketValidationError
from lottery_results.matcher import build_query, match_ticket
from lottery_results.models import DrawInfo, MatchResult, MatchStatus
from lottery_results.parser import parse_result_text
from lottery_results.scraper import (
    download_pdf,
    extract_draw_no,
    extract_pdf_text,
    fetch_result_page,
    parse_draw_listing,
    save_pdf,
    wait_interval,
)

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """ロギングの初期設定."""
    log_file = LOG_DIR / f"collector_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def today_in_draw_timezone() -> str:
    """抽選地（IST）の今日の日付を ISO 8601 で返す."""
    return datetime.now(ZoneInfo(DRAW_TIMEZONE)).date().isoformat()


def run(target_date: str | None = None) -> dict[str, int]:
    """結果一覧の未保存分を取り込む.

    Args:
        target_date: 指定時はその日付 (YYYY-MM-DD) の抽選回のみ

    Returns:
        {"found", "skipped", "saved", "failed"} の件数
    """
    logger.info("=== 結果取り込み 開始 (対象日: %s) ===", target_date or "全件")
    start_time = time.time()
    summary = {"found": 0, "skipped": 0, "saved": 0, "failed": 0}

    # 1. 結果一覧
    html = fetch_result_page()
    if html is None:
        logger.error("結果一覧ページを取得できませんでした。終了します。")
        return summary

    listings = parse_draw_listing(html, target_date)
    summary["found"] = len(listings)
    logger.info("一覧上の抽選回: %d 件", len(listings))

    for listing in listings:
        # 2. 保存済みチェック
        try:
            exists = draw_exists(listing.date)
        except Exception as e:
            logger.error("保存済みチェック失敗: draw_date=%s, error=%s", listing.date, e)
            summary["failed"] += 1
            continue

        if exists:
            summary["skipped"] += 1
            if target_date:
                logger.info("スキップ（保存済み）: %s", listing.date)
            continue

        logger.info("取り込み中: %s (%s)", listing.name, listing.date)

        # 3. PDF
        data = download_pdf(listing.url)
        if data is None:
            summary["failed"] += 1
            wait_interval()
            continue

        try:
            pdf_url = save_pdf(listing, data)
            text = extract_pdf_text(data)

            # 4. 解析
            categories = parse_result_text(text)
            if not categories:
                logger.error("等級を1件も解析できませんでした: %s (%s)", listing.name, listing.date)
                summary["failed"] += 1
                continue

            # 5. 保存
            insert_draw(listing, extract_draw_no(listing.name), pdf_url, categories)
            summary["saved"] += 1
        except Exception as e:
            logger.error("取り込み失敗: draw_date=%s, error=%s", listing.date, e)
            summary["failed"] += 1
        finally:
            wait_interval()

    elapsed = time.time() - start_time
    logger.info("=== 結果取り込み 完了 ===")
    logger.info(
        "一覧: %d 件, 保存: %d 件, スキップ: %d 件, 失敗: %d 件, 所要時間: %.1f 秒",
        summary["found"], summary["saved"], summary["skipped"], summary["failed"], elapsed,
    )
    return summary


def scrape_latest() -> dict[str, int]:
    """IST の今日の抽選回を取り込む（定期実行用）."""
    return run(today_in_draw_timezone())


def check_result(draw_date: str, ticket: str) -> MatchResult:
    """抽選日とチケット番号から当選を照合する.

    Raises:
        TicketValidationError: チケット入力が不正（DB 参照前に弾く）
    """
    query = build_query(ticket)

    draw = get_draw_by_date(draw_date)
    if draw is None:
        return MatchResult(status=MatchStatus.NO_DRAW)

    categories = get_prize_categories(draw.id)
    return match_ticket(query, categories, draw)


def format_result(result: MatchResult) -> str:
    """照合結果を表示用の文字列にする."""
    if result.status is MatchStatus.NO_DRAW:
        return "No results found for this date. Results are usually published after 3:00 PM."

    draw = result.draw
    header = f"{draw.lottery_name} ({draw.draw_no})"
    if result.status is MatchStatus.WIN:
        return (
            f"{header}: WIN - {result.category.name} "
            f"Rs {result.category.amount:,} (winning ticket {result.ticket.raw_text})"
        )
    return f"{header}: NO WIN"


def format_draws(draws: list[DrawInfo]) -> str:
    """保存済み抽選回の一覧を 1 行 1 件で返す."""
    if not draws:
        return "No draws stored yet."
    return "\n".join(
        f"{d.draw_date}  {d.draw_no:<10} {d.lottery_name}  {d.pdf_url or '-'}" for d in draws
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """コマンドライン引数を解析する."""
    parser = argparse.ArgumentParser(description="Kerala lottery result collector")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Fetch and store draw results")
    scope = ingest.add_mutually_exclusive_group()
    scope.add_argument("--date", default=None, help="Draw date (YYYY-MM-DD)")
    scope.add_argument(
        "--all",
        action="store_true",
        help="Every draw on the result page that is not stored yet",
    )

    check = sub.add_parser("check", help="Check a ticket against a stored draw")
    check.add_argument("date", help="Draw date (YYYY-MM-DD)")
    check.add_argument("ticket", help='Ticket number, e.g. "DF 869610" or "0456"')

    draws = sub.add_parser("draws", help="List recently stored draws")
    draws.add_argument("--limit", type=int, default=30, help="Number of draws (default: 30)")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI エントリーポイント. 終了コードを返す."""
    args = parse_args(argv)
    setup_logging()

    if args.command == "ingest":
        if args.all:
            run()
        elif args.date:
            run(args.date)
        else:
            scrape_latest()
        return 0

    if args.command == "draws":
        print(format_draws(list_recent_draws(args.limit)))
        return 0

    try:
        result = check_result(args.date, args.ticket)
    except TicketValidationError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 2
    print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
