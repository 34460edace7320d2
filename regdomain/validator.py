from __future__ import annotations
import re
from enum import Enum
from typing import Optional

# Hostnames are dot-separated labels of 1-63 chars each, 255 chars in total.
# Allowed chars: a-z, 0-9 and "-" (not as first or last char of a label).
_DOMAIN_RE = re.compile(
    r"(?:[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?\.)+"
    r"[a-z0-9](?:[a-z0-9\-]{0,60}[a-z0-9])?\.?"
)
_LABEL_CHARS_RE = re.compile(r"[a-z0-9\-]+")

MAX_DOMAIN_LENGTH = 255
MAX_LABEL_LENGTH = 63


class ErrorCode(str, Enum):
    DOMAIN_TOO_SHORT = "DOMAIN_TOO_SHORT"
    DOMAIN_TOO_LONG = "DOMAIN_TOO_LONG"
    LABEL_STARTS_WITH_DASH = "LABEL_STARTS_WITH_DASH"
    LABEL_ENDS_WITH_DASH = "LABEL_ENDS_WITH_DASH"
    LABEL_TOO_LONG = "LABEL_TOO_LONG"
    LABEL_TOO_SHORT = "LABEL_TOO_SHORT"
    LABEL_INVALID_CHARS = "LABEL_INVALID_CHARS"
    LABEL_ERROR = "LABEL_ERROR"

    @property
    def message(self) -> str:
        return ERROR_CODES[self.value]


ERROR_CODES = {
    "DOMAIN_TOO_SHORT": "Domain name too short.",
    "DOMAIN_TOO_LONG": "Domain name too long. It should be no more than 255 chars.",
    "LABEL_STARTS_WITH_DASH": "Domain name label can not start with a dash.",
    "LABEL_ENDS_WITH_DASH": "Domain name label can not end with a dash.",
    "LABEL_TOO_LONG": "Domain name label should be at most 63 chars long.",
    "LABEL_TOO_SHORT": "Domain name label should be at least 1 character long.",
    "LABEL_INVALID_CHARS": "Domain name label can only contain alphanumeric characters or dashes.",
    "LABEL_ERROR": "Domain name is invalid",
}


def validate(ascii_domain: str) -> Optional[ErrorCode]:
    """Return the first problem found in a lowercased ASCII domain, or None."""
    if len(ascii_domain) < 1:
        return ErrorCode.DOMAIN_TOO_SHORT
    if len(ascii_domain) > MAX_DOMAIN_LENGTH:
        return ErrorCode.DOMAIN_TOO_LONG

    if _DOMAIN_RE.fullmatch(ascii_domain):
        return None

    # Pattern failed: find which label is at fault
    for label in ascii_domain.split("."):
        if not label:
            return ErrorCode.LABEL_TOO_SHORT
        if len(label) > MAX_LABEL_LENGTH:
            return ErrorCode.LABEL_TOO_LONG
        if label[0] == "-":
            return ErrorCode.LABEL_STARTS_WITH_DASH
        if label[-1] == "-":
            return ErrorCode.LABEL_ENDS_WITH_DASH
        if not _LABEL_CHARS_RE.fullmatch(label):
            return ErrorCode.LABEL_INVALID_CHARS
    return None
