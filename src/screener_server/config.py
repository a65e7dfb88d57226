"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from tariff_screener.leads import DEFAULT_FORM_FIELDS


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Ruleset YAML (None → the packaged rules/screener.yaml)
    ruleset_path: str | None = None

    # Logging
    log_level: str = "INFO"

    # Raise (HTTP 400) on invalid answers/navigation instead of ignoring them
    strict_transitions: bool = False

    # Spacing between processing messages
    stage_interval_ms: int = 1200

    # Lead capture: no URL means leads are kept in memory
    lead_form_url: str | None = None
    lead_form_fields: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FORM_FIELDS))

    # Idle sessions are evicted after this many seconds (0 = never)
    session_ttl_seconds: int = 3600

    # Upper bound on live sessions; the least recently used is evicted
    max_sessions: int = 10000


def _parse_form_fields(raw: str) -> dict[str, str]:
    """Parse ``email=entry.1,timeline=entry.5`` into a field map."""
    fields = dict(DEFAULT_FORM_FIELDS)
    for pair in raw.split(","):
        if "=" not in pair:
            continue
        name, param = pair.split("=", 1)
        if name.strip() and param.strip():
            fields[name.strip()] = param.strip()
    return fields


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` and ``SCREENER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        ruleset_path=os.getenv("SCREENER_RULESET_PATH") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        strict_transitions=_env_bool("SCREENER_STRICT_TRANSITIONS", False),
        stage_interval_ms=int(os.getenv("SCREENER_STAGE_INTERVAL_MS", "1200")),
        lead_form_url=os.getenv("SCREENER_LEAD_FORM_URL") or None,
        lead_form_fields=_parse_form_fields(os.getenv("SCREENER_LEAD_FORM_FIELDS", "")),
        session_ttl_seconds=int(os.getenv("SCREENER_SESSION_TTL_SECONDS", "3600")),
        max_sessions=int(os.getenv("SCREENER_MAX_SESSIONS", "10000")),
    )
