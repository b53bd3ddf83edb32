"""Secret redaction for log output."""

import logging
import os
import re

# Values of these variables never show up in log output
_SECRET_ENV_VARS = [
    "TRIFONIUS_TARGET_TOKEN",
    "TRIFONIUS_TARGET_PASSWORD",
]

# Per-tenant password variables, e.g. TRIFONIUS_TARGET_TENANT_GREENBOX_PASSWORD
_SECRET_ENV_VAR_PATTERN = re.compile(r"^TRIFONIUS_TARGET_TENANT_[A-Z0-9_]+_PASSWORD$")

_MIN_SECRET_LENGTH = 8

# None until first use, False when no secrets are set
_secret_pattern: re.Pattern | bool | None = None


def _get_secret_pattern() -> re.Pattern | bool:
    global _secret_pattern
    if _secret_pattern is None:
        names = set(_SECRET_ENV_VARS) | {name for name in os.environ if _SECRET_ENV_VAR_PATTERN.match(name)}
        values = {os.environ.get(name, "") for name in names}
        # longest first, so a secret containing another one is masked whole
        secrets = sorted((v for v in values if len(v) >= _MIN_SECRET_LENGTH), key=len, reverse=True)
        _secret_pattern = re.compile("|".join(map(re.escape, secrets))) if secrets else False
    return _secret_pattern


def redact_secrets(text: str) -> str:
    """Replace secret env var values in *text* with '***'."""
    pattern = _get_secret_pattern()
    return pattern.sub("***", text) if pattern else text


def reset_secret_cache():
    """Forget cached secret values, e.g. after the environment changed."""
    global _secret_pattern
    _secret_pattern = None


class SecretRedactingFilter(logging.Filter):
    """Handler filter that masks secret values in log records.

    The record is formatted first, so f-string messages and %-style
    messages with args are treated the same.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if _get_secret_pattern():
            record.msg = redact_secrets(record.getMessage())
            record.args = None
        return True
