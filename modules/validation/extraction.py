"""
Token extraction from free text.

Scans text with the unanchored extraction patterns. Identifier kinds that
carry a check digit are confirmed through the ValidationService, so only
identifiers that pass their checksum are returned.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Pattern

from modules.validation import patterns
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

_URL_TRAILING_PUNCTUATION = re.compile(r"[.,!?:;]+$")


def _unique(items: List[Any]) -> List[Any]:
    seen = set()
    out = []
    for item in items:
        marker = item if isinstance(item, str) else tuple(sorted(item.items()))
        if marker not in seen:
            seen.add(marker)
            out.append(item)
    return out


def _scan(pattern: Pattern, text: str) -> List[str]:
    if pattern.groups:
        return [m.group(1) for m in pattern.finditer(text)]
    return [m.group(0) for m in pattern.finditer(text)]


class TokenExtractor:
    """
    Extracts links, social tokens and identifiers from text.

    Kinds:
        urls, emails, phones, hashtags, mentions, twitter_handles,
        markdown_links, hex_colors, ips, uuids, mac_addresses,
        isbns, issns, vins, ibans, credit_cards, ean13, upca

    Usage:
        extractor = TokenExtractor(service)
        tokens = extractor.extract("Read ISBN 978-3-16-148410-0 at https://example.com.")
        tokens["urls"]   # ["https://example.com"]
        tokens["isbns"]  # ["978-3-16-148410-0"]
    """

    # kind -> (extraction pattern, validator symbol confirming each match)
    IDENTIFIER_KINDS = {
        "hex_colors": (patterns.HEX_COLOR_EXTRACT, None),
        "ips": (patterns.IP_EXTRACT, None),
        "uuids": (patterns.UUID_EXTRACT, None),
        "mac_addresses": (patterns.MAC_ADDRESS_EXTRACT, None),
        "isbns": (patterns.ISBN_EXTRACT, "isbn"),
        "issns": (patterns.ISSN_EXTRACT, "issn"),
        "vins": (patterns.VIN_EXTRACT, "vin"),
        "ibans": (patterns.IBAN_EXTRACT, "iban"),
        "credit_cards": (patterns.CREDIT_CARD_EXTRACT, "luhn"),
        "ean13": (patterns.EAN13_EXTRACT, "ean13"),
        "upca": (patterns.UPCA_EXTRACT, "upca"),
    }

    def __init__(self, service=None):
        """
        Args:
            service: ValidationService used to confirm checksum identifiers.
                     Without one, identifier matches are returned unconfirmed.
        """
        self.service = service
        self._extractors: Dict[str, Callable[[str], List[Any]]] = {
            "urls": self.extract_urls,
            "emails": lambda text: _unique(_scan(patterns.EMAIL_EXTRACT, text)),
            "phones": lambda text: _unique(_scan(patterns.PHONE_EXTRACT, text)),
            "hashtags": lambda text: _unique(_scan(patterns.HASHTAG_EXTRACT, text)),
            "mentions": lambda text: _unique(_scan(patterns.MENTION_EXTRACT, text)),
            "twitter_handles": lambda text: _unique(_scan(patterns.TWITTER_EXTRACT, text)),
            "markdown_links": self.extract_markdown_links,
        }
        for kind, (pattern, symbol) in self.IDENTIFIER_KINDS.items():
            self._extractors[kind] = self._identifier_extractor(pattern, symbol)

    @property
    def kinds(self) -> List[str]:
        return list(self._extractors.keys())

    def extract(self, text: Any) -> Dict[str, List[Any]]:
        """
        Extract every kind of token.

        Args:
            text: Free text; anything that is not a string yields empty lists

        Returns:
            Dict of kind -> tokens in order of first appearance, deduplicated
        """
        if not isinstance(text, str):
            return {kind: [] for kind in self._extractors}
        return {kind: extractor(text) for kind, extractor in self._extractors.items()}

    def extract_kind(self, text: Any, kind: str) -> List[Any]:
        """
        Extract a single kind of token.

        Raises:
            KeyError: If the kind is unknown
        """
        if kind not in self._extractors:
            raise KeyError(f"Unknown extraction kind: {kind}")
        if not isinstance(text, str):
            return []
        return self._extractors[kind](text)

    def extract_urls(self, text: str) -> List[str]:
        urls = [_URL_TRAILING_PUNCTUATION.sub("", url) for url in _scan(patterns.URL_EXTRACT, text)]
        return _unique([url for url in urls if url])

    def extract_markdown_links(self, text: str) -> List[Dict[str, str]]:
        links = [
            {"text": m.group(1), "url": m.group(2)}
            for m in patterns.MARKDOWN_LINK_EXTRACT.finditer(text)
        ]
        return _unique(links)

    def _identifier_extractor(self, pattern: Pattern, symbol: Optional[str]):
        def extract(text: str) -> List[str]:
            matches = _unique(_scan(pattern, text))
            if symbol is None or self.service is None:
                return matches
            if not self.service.has(symbol):
                logger.debug(f"No '{symbol}' validator registered; returning unconfirmed matches")
                return matches
            return [m for m in matches if self.service.validate(symbol, m).valid]
        return extract
