# brief_relay/config.py
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5174
DEFAULT_HTTPS_PORT = 443
DEFAULT_HTTP_PORT = 80
DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"

LISTENER_PLAIN = "plain"
LISTENER_SECURE = "secure"


@dataclass(frozen=True)
class RelayConfig:
    """
    Process-wide settings, built once at startup and injected into the app.

    Nothing here is mutated after construction; the handler and the delivery
    helper only ever read from it.
    """
    bot_token: Optional[str] = None
    admin_ids: Tuple[str, ...] = ()
    port: int = DEFAULT_PORT
    listener: str = LISTENER_PLAIN

    # Secure listener
    tls_cert_path: str = "/etc/letsencrypt/live/localhost/fullchain.pem"
    tls_key_path: str = "/etc/letsencrypt/live/localhost/privkey.pem"
    https_port: int = DEFAULT_HTTPS_PORT
    http_port: int = DEFAULT_HTTP_PORT

    # Rate limiting (fixed window)
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 60
    redis_url: Optional[str] = None

    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE
    telegram_timeout_seconds: Optional[float] = 10.0
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def is_secure(self) -> bool:
        return self.listener == LISTENER_SECURE

    def warn_if_incomplete(self) -> bool:
        """Log a warning when deliveries cannot succeed. Never fatal."""
        if not self.bot_token or not self.admin_ids:
            logger.warning("⚠️  TELEGRAM_BOT_TOKEN or TELEGRAM_ADMIN_IDS not set in environment")
            return False
        return True


def parse_admin_ids(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma separated id list, dropping blanks ("1, 2,," -> ("1", "2"))"""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _get_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_timeout(environ: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    if raw.strip().lower() == "none":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")


def load_config(environ: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """
    Build a RelayConfig from environment variables.

    Args:
        environ: Mapping to read from, defaults to os.environ

    Returns:
        RelayConfig. Missing credentials only produce a warning.
    """
    env = os.environ if environ is None else environ

    listener = env.get("RELAY_LISTENER", LISTENER_PLAIN).strip().lower() or LISTENER_PLAIN
    if listener not in (LISTENER_PLAIN, LISTENER_SECURE):
        raise ValueError(f"RELAY_LISTENER must be '{LISTENER_PLAIN}' or '{LISTENER_SECURE}', got {listener!r}")

    domain = env.get("TLS_DOMAIN", "localhost")
    cert_dir = f"/etc/letsencrypt/live/{domain}"

    cors_raw = env.get("CORS_ORIGINS", "*")
    cors_origins = tuple(o.strip() for o in cors_raw.split(",") if o.strip()) or ("*",)

    config = RelayConfig(
        bot_token=env.get("TELEGRAM_BOT_TOKEN") or None,
        admin_ids=parse_admin_ids(env.get("TELEGRAM_ADMIN_IDS")),
        port=_get_int(env, "PORT", DEFAULT_PORT),
        listener=listener,
        tls_cert_path=env.get("TLS_CERT_PATH") or f"{cert_dir}/fullchain.pem",
        tls_key_path=env.get("TLS_KEY_PATH") or f"{cert_dir}/privkey.pem",
        https_port=_get_int(env, "HTTPS_PORT", DEFAULT_HTTPS_PORT),
        http_port=_get_int(env, "HTTP_PORT", DEFAULT_HTTP_PORT),
        rate_limit_max_requests=_get_int(env, "RATE_LIMIT_MAX_REQUESTS", 10),
        rate_limit_window_seconds=_get_int(env, "RATE_LIMIT_WINDOW_SECONDS", 60),
        redis_url=env.get("REDIS_URL") or None,
        telegram_api_base=(env.get("TELEGRAM_API_BASE") or DEFAULT_TELEGRAM_API_BASE).rstrip("/"),
        telegram_timeout_seconds=_get_timeout(env, "TELEGRAM_TIMEOUT_SECONDS", 10.0),
        cors_origins=cors_origins,
    )

    config.warn_if_incomplete()
    logger.info(
        f"Loaded config: listener={config.listener}, recipients={len(config.admin_ids)}, "
        f"rate_limit={config.rate_limit_max_requests}/{config.rate_limit_window_seconds}s"
    )
    return config
