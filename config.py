"""
Boxtal Connect — Configuration
All settings are read from environment variables with sensible defaults.
"""
import os

# ── Database ──────────────────────────────────────────────────────────────────
DATABASE_PATH         = os.getenv("DATABASE_PATH", "boxtal_connect.db")

# ── Auth ──────────────────────────────────────────────────────────────────────
CLIENT_SECRET         = os.getenv("CLIENT_SECRET", "")  # Empty = dev mode (no auth)
ADMIN_SECRET          = os.getenv("ADMIN_SECRET", "")   # Empty = dev mode (no auth)
NONCE_SECRET          = os.getenv("NONCE_SECRET", "")   # Empty = ajax routes disabled
NONCE_TICK_SEC        = 12 * 60 * 60  # a nonce stays valid for two ticks

# base64-encoded 32-byte key shared with the Boxtal platform
ENCRYPTION_KEY        = os.getenv("ENCRYPTION_KEY", "")

# ── Boxtal API ────────────────────────────────────────────────────────────────
BOXTAL_API_URL        = os.getenv("BOXTAL_API_URL", "https://api.boxtal.com").rstrip("/")
LOCALE                = os.getenv("LOCALE", "fr_FR")
API_TIMEOUT_SEC       = float(os.getenv("API_TIMEOUT_SEC", "10"))

# ── Rate limiting ─────────────────────────────────────────────────────────────
# Proxy addresses whose X-Forwarded-For header is honoured (comma-separated)
TRUSTED_PROXIES       = {p.strip() for p in os.getenv("TRUSTED_PROXIES", "").split(",") if p.strip()}

# ── Notices ───────────────────────────────────────────────────────────────────
NOTICE_TTL_SECONDS    = 24 * 60 * 60  # ad-hoc notices live one day

# ── Background cleanup ────────────────────────────────────────────────────────
CLEANUP_INTERVAL_SEC  = int(os.getenv("CLEANUP_INTERVAL_SEC", str(60 * 60)))  # 1 hour

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL             = os.getenv("LOG_LEVEL", "INFO").upper()
