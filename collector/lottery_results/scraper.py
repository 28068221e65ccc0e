"""ケララ州宝くじ公式サイトのスクレイピングモジュール.

取得の流れ:
  1. 結果一覧ページ（HTML テーブル）から宝くじ名・抽選日・PDF リンクを取得
  2. 結果 PDF をダウンロードしてローカルに保存
  3. pdfplumber で PDF からテキストを取り出す
"""

from __future__ import annotations

import io
import logging
import random
import re
import time
from pathlib import Path
from urllib.parse import urljoin

import pdfplumber
import requests
from bs4 import BeautifulSoup

from lottery_results.config import (
    BASE_URL,
    PDF_DIR,
    PDF_PUBLIC_PREFIX,
    REQUEST_INTERVAL_MAX,
    REQUEST_INTERVAL_MIN,
    REQUEST_TIMEOUT,
    RESULT_URL,
    USER_AGENT,
    VERIFY_SSL,
)
from lottery_results.models import DrawListing

logger = logging.getLogger(__name__)

# 一覧の日付列 "5-1-2026" / "05/01/2026"
_DATE_PATTERN = re.compile(r"(\d{1,2})[-/](\d{1,2})[-/](\d{4})")
# 宝くじ名中の回号 "KARUNYA PLUS KN-123" → "KN-123"
_DRAW_NO_PATTERN = re.compile(r"([A-Z]+-\d+)")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)

_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def fetch_result_page() -> str | None:
    """結果一覧ページの HTML を取得する.

    Returns:
        HTML 文字列。失敗時は None。
    """
    try:
        resp = requests.get(
            RESULT_URL, headers=_HEADERS, timeout=REQUEST_TIMEOUT, verify=VERIFY_SSL
        )
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as e:
        logger.error("結果一覧ページ取得失敗: url=%s, error=%s", RESULT_URL, e)
        return None


def download_pdf(url: str) -> bytes | None:
    """結果 PDF をダウンロードする. 失敗時は None."""
    try:
        resp = requests.get(
            url, headers=_HEADERS, timeout=REQUEST_TIMEOUT, verify=VERIFY_SSL
        )
        resp.raise_for_status()
        return resp.content
    except requests.RequestException as e:
        logger.error("PDF 取得失敗: url=%s, error=%s", url, e)
        return None


def wait_interval() -> None:
    """リクエスト間隔を 1〜3 秒ランダムで待機する."""
    interval = random.uniform(REQUEST_INTERVAL_MIN, REQUEST_INTERVAL_MAX)
    time.sleep(interval)


def parse_draw_listing(html: str, target_date: str | None = None) -> list[DrawListing]:
    """結果一覧 HTML から抽選回のリストを抽出する.

    Args:
        html: 結果一覧ページの HTML
        target_date: 指定時はその日付 (YYYY-MM-DD) の行だけを返す

    Returns:
        ページ上の出現順の DrawListing リスト
    """
    soup = BeautifulSoup(html, "html.parser")
    results: list[DrawListing] = []

    for row in soup.find_all("tr"):
        cols = row.find_all("td")
        if len(cols) < 3:
            continue

        name = cols[0].get_text(strip=True)
        draw_date = _parse_listing_date(cols[1].get_text(strip=True))
        link = cols[2].find("a")
        href = link.get("href") if link else None
        if not draw_date or not href:
            continue

        if target_date and draw_date != target_date:
            continue

        url = href if href.startswith("http") else urljoin(BASE_URL + "/", href)
        results.append(DrawListing(name=name, date=draw_date, url=url))

    return results


def _parse_listing_date(text: str) -> str | None:
    """"D-M-YYYY" / "DD/MM/YYYY" を ISO 8601 にする. 取れなければ None."""
    m = _DATE_PATTERN.search(text)
    if not m:
        return None
    day, month, year = m.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def extract_draw_no(name: str) -> str:
    """宝くじ名から回号を取り出す.

    "KR-123" 形式が無ければ先頭の単語を返す。
    """
    m = _DRAW_NO_PATTERN.search(name)
    if m:
        return m.group(1)
    parts = name.split()
    return parts[0] if parts else name


def pdf_filename(listing: DrawListing) -> str:
    """保存用のファイル名 "<宝くじ名>_<抽選日>.pdf" を返す."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", listing.name)
    return f"{safe_name}_{listing.date}.pdf"


def save_pdf(listing: DrawListing, data: bytes, pdf_dir: Path = PDF_DIR) -> str:
    """PDF をローカルに保存し、公開パスを返す."""
    pdf_dir.mkdir(parents=True, exist_ok=True)
    filename = pdf_filename(listing)
    (pdf_dir / filename).write_bytes(data)
    logger.info("PDF 保存: %s", filename)
    return f"{PDF_PUBLIC_PREFIX}/{filename}"


def extract_pdf_text(data: bytes) -> str:
    """PDF の全ページのテキストを改行区切りで連結して返す."""
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages)
