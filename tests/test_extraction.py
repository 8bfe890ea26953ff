"""
Tests for token extraction from free text.
"""

import pytest

from modules.validation.extraction import TokenExtractor

TEXT = (
    "Read ISBN 978-3-16-148410-0 at https://example.com. Follow @jack and #python! "
    "Color #abcdef, server 192.168.1.1, id 123e4567-e89b-12d3-a456-426614174000."
)


@pytest.fixture
def extractor(service):
    return TokenExtractor(service)


def test_extract_all_kinds(extractor):
    tokens = extractor.extract(TEXT)

    assert set(tokens) == set(extractor.kinds)
    assert tokens["urls"] == ["https://example.com"]
    assert tokens["isbns"] == ["978-3-16-148410-0"]
    assert tokens["mentions"] == ["jack"]
    assert tokens["twitter_handles"] == ["jack"]
    assert "python" in tokens["hashtags"]
    assert tokens["hex_colors"] == ["#abcdef"]
    assert tokens["ips"] == ["192.168.1.1"]
    assert tokens["uuids"] == ["123e4567-e89b-12d3-a456-426614174000"]
    assert tokens["credit_cards"] == []


def test_url_trailing_punctuation_is_stripped(extractor):
    text = "See https://a.example.com/x?, https://b.example.com! and https://a.example.com/x?"
    assert extractor.extract_kind(text, "urls") == ["https://a.example.com/x", "https://b.example.com"]


def test_checksum_identifiers_are_confirmed(extractor):
    text = "Pay with 4111 1111 1111 1111 or 4111 1111 1111 1112."
    assert extractor.extract_kind(text, "credit_cards") == ["4111 1111 1111 1111"]

    text = "VIN 1HGCM82633A004352 and 1HGCM82633A004353"
    assert extractor.extract_kind(text, "vins") == ["1HGCM82633A004352"]

    text = "Wire to GB82WEST12345698765432, not GB82WEST12345698765431"
    assert extractor.extract_kind(text, "ibans") == ["GB82WEST12345698765432"]

    text = "barcode 4006381333931 and 4006381333932"
    assert extractor.extract_kind(text, "ean13") == ["4006381333931"]

    text = "upc 036000291452 or 036000291453"
    assert extractor.extract_kind(text, "upca") == ["036000291452"]

    text = "journal 2049-3630 (old: 2049-3631)"
    assert extractor.extract_kind(text, "issns") == ["2049-3630"]


def test_without_service_matches_are_unconfirmed():
    extractor = TokenExtractor()
    text = "VIN 1HGCM82633A004352 and 1HGCM82633A004353"
    assert extractor.extract_kind(text, "vins") == ["1HGCM82633A004352", "1HGCM82633A004353"]


def test_markdown_links_and_emails(extractor):
    text = "[Docs](https://example.com/docs) or mail me@example.com"
    tokens = extractor.extract(text)
    assert tokens["markdown_links"] == [{"text": "Docs", "url": "https://example.com/docs"}]
    assert tokens["urls"] == ["https://example.com/docs"]
    assert tokens["emails"] == ["me@example.com"]
    assert tokens["mentions"] == []


def test_duplicates_are_removed_in_order(extractor):
    assert extractor.extract_kind("#b #a #b", "hashtags") == ["b", "a"]


@pytest.mark.parametrize("text", [None, 42, ["#a"]])
def test_non_string_input(extractor, text):
    tokens = extractor.extract(text)
    assert all(found == [] for found in tokens.values())
    assert extractor.extract_kind(text, "hashtags") == []


def test_unknown_kind(extractor):
    with pytest.raises(KeyError):
        extractor.extract_kind("text", "zip_codes")
