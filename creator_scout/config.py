"""
Centralized configuration — all env vars and tunable constants.
"""
import os


# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Flask ─────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

# ── Instagram search ──────────────────────────────────────────────────────────
INSTAGRAM_SEARCH_URL = os.getenv(
    'INSTAGRAM_SEARCH_URL', 'https://www.instagram.com/web/search/topsearch/',
)
INSTAGRAM_USER_AGENT = os.getenv(
    'INSTAGRAM_USER_AGENT',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
)
INSTAGRAM_TIMEOUT = int(os.getenv('INSTAGRAM_TIMEOUT', '20'))
SCRAPE_DEFAULT_LIMIT = int(os.getenv('SCRAPE_DEFAULT_LIMIT', '50'))

# ── Import / search ───────────────────────────────────────────────────────────
IMPORT_BATCH_SIZE = int(os.getenv('IMPORT_BATCH_SIZE', '50'))
IMPORT_ERROR_PREVIEW = 3          # batch errors shown before "+N more"
SEARCH_DEFAULT_LIMIT = 100
MAX_FOLLOWERS_UNBOUNDED = 10_000_000   # max_followers at or above this = no cap
