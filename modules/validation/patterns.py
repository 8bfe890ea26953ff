"""
Pattern library.

Named regular expressions for the syntactic formats the engine knows about.

Two families live here:
- Validation patterns (``*_REGEX`` / ``*_PATTERN``): anchored, matched
  against a whole value.
- Extraction patterns (``*_EXTRACT``): unanchored, scanned over free text.

Validator specs refer to patterns by name. A regex spec that does not name a
pattern is resolved by convention: ``SYMBOL.upper() + "_REGEX"``.
"""

import re
from typing import Dict, List, Optional, Pattern

_IPV4_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"

# ==============================================================================
# VALIDATION PATTERNS (anchored)
# ==============================================================================

ISBN_REGEX = re.compile(r"\A(?:97[89][-\s]?\d{1,5}[-\s]?\d{1,7}[-\s]?\d{1,7}[-\s]?\d|\d{9}[\dXx])\Z", re.ASCII)
EAN13_REGEX = re.compile(r"\A\d{13}\Z", re.ASCII)
UPCA_REGEX = re.compile(r"\A\d{12}\Z", re.ASCII)
UUID_REGEX = re.compile(r"\A[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\Z", re.ASCII)
CREDIT_CARD_REGEX = re.compile(r"\A(?:\d[ -]*?){13,19}\Z", re.ASCII)
HEX_COLOR_REGEX = re.compile(r"\A#(?:[0-9a-fA-F]{3}){1,2}\Z", re.ASCII)
IP_REGEX = re.compile(rf"\A(?:{_IPV4_OCTET}\.){{3}}{_IPV4_OCTET}\Z", re.ASCII)
VIN_REGEX = re.compile(r"\A[A-HJ-NPR-Z0-9]{17}\Z", re.IGNORECASE | re.ASCII)
IMEI_REGEX = re.compile(r"\A\d{15}\Z", re.ASCII)
ISSN_REGEX = re.compile(r"\A\d{4}-?\d{3}[\dXx]\Z", re.ASCII)
MAC_ADDRESS_REGEX = re.compile(r"\A(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}\Z", re.ASCII)
IBAN_REGEX = re.compile(r"\A[A-Z]{2}\d{2}[A-Z0-9]{11,30}\Z", re.ASCII)
HASHTAG_PATTERN = re.compile(r"\A\w+\Z", re.ASCII)
MENTION_PATTERN = re.compile(r"\A\w+\Z", re.ASCII)
TWITTER_HANDLE_PATTERN = re.compile(r"\A\w{1,15}\Z", re.ASCII)
INSTAGRAM_HANDLE_PATTERN = re.compile(r"\A[\w.]{1,30}\Z", re.ASCII)
URL_PATTERN = re.compile(r"\Ahttps?://[^\s]+\Z", re.ASCII)

# ==============================================================================
# EXTRACTION PATTERNS (unanchored, for scanning free text)
# ==============================================================================

EMAIL_EXTRACT = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b", re.ASCII)
PHONE_EXTRACT = re.compile(r"(?<![\w-])\+?\d[\d\s\-()]{7,}\d\b", re.ASCII)
URL_EXTRACT = re.compile(r"https?://[^\s<>\"')\]]+", re.ASCII)
MARKDOWN_LINK_EXTRACT = re.compile(r"\[([^\]]+)\]\((https?://[^)]+)\)", re.ASCII)
HASHTAG_EXTRACT = re.compile(r"(?<![\w&#])#(\w+)", re.ASCII)
MENTION_EXTRACT = re.compile(r"(?<![\w.@])@(\w+)", re.ASCII)
TWITTER_EXTRACT = re.compile(r"(?<![\w.@])@([A-Za-z0-9_]{1,15})\b", re.ASCII)
HEX_COLOR_EXTRACT = re.compile(r"(?<![\w&])#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b", re.ASCII)
IP_EXTRACT = re.compile(rf"(?<![\d.])(?:{_IPV4_OCTET}\.){{3}}{_IPV4_OCTET}(?![\d.]*\d)", re.ASCII)
UUID_EXTRACT = re.compile(r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b", re.ASCII)
MAC_ADDRESS_EXTRACT = re.compile(r"\b(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}\b", re.ASCII)
ISBN_EXTRACT = re.compile(r"\b(?:97[89][-\s]?\d{1,5}[-\s]?\d{1,7}[-\s]?\d{1,7}[-\s]?\d|\d{9}[\dXx])\b", re.ASCII)
ISSN_EXTRACT = re.compile(r"\b\d{4}-\d{3}[\dXx]\b", re.ASCII)
VIN_EXTRACT = re.compile(r"\b[A-HJ-NPR-Z0-9]{17}\b", re.ASCII)
IBAN_EXTRACT = re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]{11,30}\b", re.ASCII)
CREDIT_CARD_EXTRACT = re.compile(r"\b\d(?:[ -]?\d){12,18}\b", re.ASCII)
EAN13_EXTRACT = re.compile(r"(?<![\d-])\d{13}(?![\d-])", re.ASCII)
UPCA_EXTRACT = re.compile(r"(?<![\d-])\d{12}(?![\d-])", re.ASCII)


def _collect_patterns() -> Dict[str, Pattern]:
    return {
        name: value
        for name, value in globals().items()
        if name.isupper() and isinstance(value, re.Pattern)
    }


PATTERNS: Dict[str, Pattern] = _collect_patterns()


def get_pattern(name: str) -> Optional[Pattern]:
    """
    Look up a compiled pattern by name.

    Args:
        name: Pattern name, e.g. "VIN_REGEX"

    Returns:
        Compiled pattern or None if no pattern has that name
    """
    if not name:
        return None
    return PATTERNS.get(name)


def convention_pattern_name(symbol: str) -> str:
    """Pattern name a regex spec falls back to when it names none."""
    return f"{symbol.upper()}_REGEX"


def list_patterns() -> List[str]:
    """List all pattern names."""
    return sorted(PATTERNS.keys())
