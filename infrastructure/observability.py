"""
Process logging and Sentry reporting for the ticketing front end.

Everything is driven by environment variables: LOG_LEVEL, SENTRY_DSN,
SENTRY_ENV, SENTRY_TRACES_SAMPLE_RATE and APP_RELEASE.
"""

import os
import logging
import re
from typing import Any, Dict

log = logging.getLogger(__name__)

# Patterns to scrub in Sentry events
SENSITIVE_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.=]+"),  # Authorization header values
    re.compile(r"[A-Za-z0-9_\-]{20,}\.[A-Za-z0-9_\-]{20,}\.[A-Za-z0-9_\-]{10,}"),  # JWT-shaped strings
    re.compile(r"((?:code|state|token)=)[^&\s]+"),  # OAuth callback and recovery query values
]

SENSITIVE_KEYS = ("token", "password", "authorization", "code", "state")


def _mask_string(val: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        if pattern.groups:
            val = pattern.sub(r"\1[REDACTED]", val)
        else:
            val = pattern.sub("[REDACTED]", val)
    return val


def _recursive_scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        scrubbed = {}
        for k, v in obj.items():
            if isinstance(k, str) and any(s in k.lower() for s in SENSITIVE_KEYS):
                scrubbed[k] = "[REDACTED]"
            else:
                scrubbed[k] = _recursive_scrub(v)
        return scrubbed
    elif isinstance(obj, list):
        return [_recursive_scrub(i) for i in obj]
    elif isinstance(obj, str):
        return _mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Removes bearer tokens, OAuth codes and
    passwords from request data and stack frame locals.
    """
    if "request" in event:
        event["request"] = _recursive_scrub(event["request"])

    if "exception" in event and "values" in event["exception"]:
        for exc in event["exception"]["values"]:
            if "stacktrace" in exc and "frames" in exc["stacktrace"]:
                for frame in exc["stacktrace"]["frames"]:
                    if "vars" in frame:
                        frame["vars"] = _recursive_scrub(frame["vars"])

    if "breadcrumbs" in event and "values" in event["breadcrumbs"]:
        event["breadcrumbs"]["values"] = _recursive_scrub(event["breadcrumbs"]["values"])

    return event


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    # 2026-02-27 15:00:00 | INFO    | use_cases.auth_flow | Session restored
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # requests logs full URLs, including OAuth callback queries
    for noisy in ("urllib3", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _init_sentry(dsn: str) -> None:
    import sentry_sdk

    environment = os.getenv("SENTRY_ENV", "development")
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=os.getenv("APP_RELEASE"),
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        send_default_pii=False,
        before_send=_scrub_sensitive_data
    )
    log.info(f"✅ Sentry SDK initialized (env: {environment})")


def setup_observability() -> None:
    """Configure process logging and, when SENTRY_DSN is set, error reporting.

    Safe to call on every Streamlit rerun: basicConfig is a no-op once the
    root logger has handlers.
    """
    _configure_logging()

    sentry_dsn = os.getenv("SENTRY_DSN")
    if sentry_dsn:
        _init_sentry(sentry_dsn)
    else:
        log.info("SENTRY_DSN not provided. Running without Sentry.")
