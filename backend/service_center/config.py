import json
import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value")


def _parse_int(name: str, raw: str | int, *, minimum: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        comparison = "greater than 0" if minimum == 1 else f"greater than or equal to {minimum}"
        raise ValueError(f"{name} must be {comparison}")
    return value


def _parse_origins(raw: str) -> list[str]:
    # Accepts CSV (a,b) or a JSON array (["a", "b"])
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"ALLOWED_ORIGINS JSON is malformed: {exc}") from exc
        if not isinstance(parsed, list):
            raise ValueError("ALLOWED_ORIGINS JSON must be an array")
        origins = [item.strip() for item in parsed if isinstance(item, str) and item.strip()]
    else:
        origins = [item.strip() for item in raw.split(",") if item.strip()]

    if not origins:
        raise ValueError("ALLOWED_ORIGINS must contain at least one origin")
    if "*" in origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
        )
    for origin in origins:
        parsed_origin = urlparse(origin)
        if parsed_origin.scheme not in {"http", "https"} or not parsed_origin.netloc:
            raise ValueError(
                "ALLOWED_ORIGINS must contain valid http/https origins with host"
            )
    return origins


class Settings(BaseModel):
    app_name: str = Field(default="Service Center Backend")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    database_url: str = Field(default="")
    allowed_origins: list[str] = Field(default_factory=list)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_recycle: int = Field(default=1800)
    db_pool_pre_ping: bool = Field(default=True)
    secret_key: str | None = Field(default=None)
    access_token_expire_minutes: int = Field(default=60)
    algorithm: str = Field(default="HS256")

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls.model_fields

        secret_key = os.getenv("SECRET_KEY", "").strip()
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set")

        raw_allowed_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
        if not raw_allowed_origins:
            raise ValueError("ALLOWED_ORIGINS environment variable must be set")
        allowed_origins = _parse_origins(raw_allowed_origins)

        database_url = os.getenv("DATABASE_URL", "").strip()
        if not database_url:
            raise ValueError("DATABASE_URL environment variable must be set")
        parsed_db = urlparse(database_url)
        if parsed_db.scheme != "postgresql+asyncpg":
            raise ValueError("DATABASE_URL must start with 'postgresql+asyncpg://'")
        if not parsed_db.hostname:
            raise ValueError("DATABASE_URL must include hostname")

        return cls(
            app_name=os.getenv("APP_NAME", defaults["app_name"].default),
            debug=_parse_bool("DEBUG", os.getenv("DEBUG", "false")),
            log_level=os.getenv("LOG_LEVEL", defaults["log_level"].default).strip().upper(),
            database_url=database_url,
            allowed_origins=allowed_origins,
            secret_key=secret_key,
            access_token_expire_minutes=_parse_int(
                "ACCESS_TOKEN_EXPIRE_MINUTES",
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults["access_token_expire_minutes"].default),
                minimum=1,
            ),
            algorithm=os.getenv("ALGORITHM", defaults["algorithm"].default),
            db_pool_size=_parse_int(
                "DB_POOL_SIZE",
                os.getenv("DB_POOL_SIZE", defaults["db_pool_size"].default),
                minimum=1,
            ),
            db_max_overflow=_parse_int(
                "DB_MAX_OVERFLOW",
                os.getenv("DB_MAX_OVERFLOW", defaults["db_max_overflow"].default),
                minimum=0,
            ),
            db_pool_recycle=_parse_int(
                "DB_POOL_RECYCLE",
                os.getenv("DB_POOL_RECYCLE", defaults["db_pool_recycle"].default),
                minimum=1,
            ),
            db_pool_pre_ping=_parse_bool(
                "DB_POOL_PRE_PING",
                os.getenv("DB_POOL_PRE_PING", str(defaults["db_pool_pre_ping"].default)),
            ),
        )


# Settings are validated on first access, not at import
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first calls build one instance.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
