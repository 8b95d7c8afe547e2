from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "***REDACTED***"

_URL_CREDS_RE = re.compile(r"(?i)\b([a-z][a-z0-9+\-.]*://)([^:@/\s]+):([^@/\s]+)@")
_JWT_RE = re.compile(r"\beyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\b")
_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9_\-\.=]+)")
_BASIC_RE = re.compile(r"(?i)\bBasic\s+([A-Za-z0-9_\-+/=]+)")

_KV_RE = re.compile(
    r"(?i)\b([A-Z0-9_]*?(?:token|secret|password|passwd|pwd|key|auth|apikey|api_key))\b(\s*[:=]\s*)([^\s,;]+)"
)
_XML_PASSWORD_RE = re.compile(r"(?i)(<password>\s*(?:<!\[CDATA\[)?)(.*?)((?:\]\]>)?\s*</password>)")
_URL_PARAM_RE = re.compile(
    r"(?i)([?&])(token|access_token|api_key|apikey|secret|password)=([^&\s]+)"
)


def redact(text: str) -> str:
    """
    Redact credentials from free text.

    Database URLs are the usual offender: driver errors echo the DSN.
    """
    s = "" if text is None else str(text)
    s = _URL_CREDS_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}:{REDACTED}@", s)
    s = _JWT_RE.sub(REDACTED, s)
    s = _BEARER_RE.sub("Bearer " + REDACTED, s)
    s = _BASIC_RE.sub("Basic " + REDACTED, s)
    s = _XML_PASSWORD_RE.sub(lambda m: f"{m.group(1)}{REDACTED}{m.group(3)}", s)
    s = _KV_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", s)
    s = _URL_PARAM_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}={REDACTED}", s)
    return s


def redact_obj(value: Any) -> Any:
    """
    Recursively redact strings within nested objects.
    """
    if isinstance(value, str):
        return redact(value)
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    if isinstance(value, Mapping):
        return {str(k): redact_obj(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [redact_obj(v) for v in value]
    return value
