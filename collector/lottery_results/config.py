"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- Supabase ---
# クライアント生成は db モジュール側で遅延させる
SUPABASE_URL: str = os.environ.get("SUPABASE_URL", "")
SUPABASE_SECRET_KEY: str = os.environ.get("SUPABASE_SECRET_KEY", "")
SUPABASE_SCHEMA: str = os.environ.get("SUPABASE_SCHEMA", "public")

# --- ケララ州宝くじ公式サイト ---
BASE_URL = "https://statelottery.kerala.gov.in"
RESULT_URL = f"{BASE_URL}/index.php/lottery-result-view"

# --- User-Agent ---
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

# --- リクエスト設定 ---
REQUEST_INTERVAL_MIN = 1.0
REQUEST_INTERVAL_MAX = 3.0
REQUEST_TIMEOUT = 30  # 秒
# 公式サイトの証明書チェーンが不完全なため既定では検証しない
VERIFY_SSL: bool = os.environ.get("VERIFY_SSL", "false").lower() == "true"

# --- 当選照合 ---
TICKET_NUMBER_MIN_LENGTH = 4
TICKET_NUMBER_MAX_LENGTH = 9

# --- 抽選日のタイムゾーン ---
DRAW_TIMEZONE = "Asia/Kolkata"

# --- PDF 保存先 ---
PDF_DIR = Path(os.environ.get("PDF_DIR", _PROJECT_ROOT / "public" / "pdfs"))
PDF_PUBLIC_PREFIX = "/public/pdfs"

# --- ログ ---
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)
