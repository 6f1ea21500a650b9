# backend/checkin/config.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _to_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


def _default_database_url() -> str:
    # 1) /app/data when running in the container
    # 2) <repo root>/data for local development
    container_data = Path("/app/data")
    if container_data.exists():
        db_path = container_data / "checkin.db"
    else:
        repo_root = Path(__file__).resolve().parents[2]
        db_path = repo_root / "data" / "checkin.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


class Settings:
    """Runtime configuration, read from the environment.

    Keyword overrides take precedence, which is how tests build an app
    against a throwaway database without touching ``os.environ``.
    """

    def __init__(self, **overrides):
        env = os.environ.get

        # ── Core ─────────────────────────────────────────────────────────────
        self.database_url = env("DATABASE_URL") or None
        self.secret_key = env("SECRET_KEY", "dev_secret")  # override in prod!
        self.cors_origins = [
            o.strip() for o in env("CORS_ORIGINS", "*").split(",") if o.strip()
        ]

        # ── Admin sessions ──────────────────────────────────────────────────
        self.jwt_ttl_hours = _to_int(env("JWT_TTL_HOURS"), 24)
        self.auth_cookie_name = env("AUTH_COOKIE_NAME", "admin_token")
        self.auth_cookie_secure = _to_bool(env("AUTH_COOKIE_SECURE"), False)

        # ── Check-in links ──────────────────────────────────────────────────
        self.token_expiration_hours = _to_int(env("TOKEN_EXPIRATION_HOURS"), 1)
        self.public_base_url = env("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")
        self.max_photo_bytes = _to_int(env("MAX_PHOTO_BYTES"), 5 * 1024 * 1024)

        # ── Reverse geocoding (Nominatim) ───────────────────────────────────
        self.geocoder_enabled = _to_bool(env("GEOCODER_ENABLED"), True)
        self.geocoder_user_agent = env("GEOCODER_USER_AGENT", "checkin-links/0.1")
        self.geocoder_timeout = _to_int(env("GEOCODER_TIMEOUT"), 5)

        # ── Logging ─────────────────────────────────────────────────────────
        self.log_level = env("LOG_LEVEL", "INFO").upper()
        self.log_to_file = _to_bool(env("LOG_TO_FILE"), False)

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise TypeError(f"unknown setting: {key}")
            setattr(self, key, value)

        if not self.database_url:
            self.database_url = _default_database_url()
