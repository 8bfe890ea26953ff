"""
Tests for the validator table: loading, presets and the example corpus.

The corpus check is the primary regression guard: every documented valid
example must pass its validator and every invalid example must fail.
"""

import pytest

from modules.validation.core.base import RuleKind
from modules.validation.core.config_loader import ValidatorSpecLoader, build_spec, load_validator_specs
from modules.validation.core.exceptions import SpecConfigurationError

EXPECTED_SYMBOLS = {
    "isbn", "vin", "issn", "iban", "luhn", "ean13", "upca", "uuid",
    "hex_color", "ip", "mac_address", "hashtag", "mention",
    "twitter_handle", "instagram_handle", "url",
}


def _corpus(kind):
    specs = load_validator_specs()
    for spec in specs.values():
        examples = spec.valid_examples if kind == "valid" else spec.invalid_examples
        for value in examples:
            yield pytest.param(spec.symbol, value, id=f"{spec.symbol}:{value!r}")


def test_table_has_all_rules(specs):
    assert set(specs) == EXPECTED_SYMBOLS


def test_table_is_read_only(specs):
    with pytest.raises(TypeError):
        specs["new"] = specs["vin"]


def test_every_rule_has_examples(specs):
    for spec in specs.values():
        assert spec.valid_examples, spec.symbol
        assert spec.invalid_examples, spec.symbol


def test_exactly_one_of_pattern_or_checksum(specs):
    for spec in specs.values():
        if spec.kind == RuleKind.CHECKSUM:
            assert spec.checksum_method and spec.pattern is None
        else:
            assert spec.checksum_method is None


def test_presets_fill_schema_tags(specs):
    assert (specs["ean13"].schema_type, specs["ean13"].schema_property) == ("Product", "gtin13")
    assert (specs["uuid"].schema_type, specs["uuid"].schema_property) == ("Thing", "identifier")
    assert (specs["twitter_handle"].schema_type, specs["twitter_handle"].schema_property) == ("Person", "sameAs")
    assert specs["isbn"].schema_property == "isbn"


def test_default_description(specs):
    assert specs["vin"].description == "Vehicle (schema.org/Vehicle/vehicleIdentificationNumber)"
    assert "Luhn" in specs["luhn"].description


@pytest.mark.parametrize("symbol, value", list(_corpus("valid")))
def test_valid_examples_pass(service, symbol, value):
    result = service.validate(symbol, value)
    assert result.valid, result.errors
    assert result.errors == []


@pytest.mark.parametrize("symbol, value", list(_corpus("invalid")))
def test_invalid_examples_fail(service, symbol, value):
    result = service.validate(symbol, value)
    assert not result.valid
    assert result.errors
    assert result.jsonld is None


class TestBuildSpec:
    """Validation of individual table entries."""

    def test_unknown_kind(self):
        with pytest.raises(SpecConfigurationError):
            build_spec("x", {"kind": "fuzzy"})

    def test_unknown_preset(self):
        with pytest.raises(SpecConfigurationError):
            build_spec("x", {"kind": "regex", "type": "gadget"}, {"thing": {}})

    def test_unknown_key(self):
        with pytest.raises(SpecConfigurationError):
            build_spec("x", {"kind": "regex", "regexp": "X"})

    def test_examples_must_be_lists(self):
        with pytest.raises(SpecConfigurationError):
            build_spec("x", {"kind": "regex", "valid": "abc"})

    def test_checksum_entry_drops_pattern(self):
        spec = build_spec("x", {"kind": "checksum", "checksum_method": "luhn_valid", "pattern": "UUID_REGEX"})
        assert spec.pattern is None
        assert spec.checksum_method == "luhn_valid"


class TestLoader:

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecConfigurationError):
            ValidatorSpecLoader(str(tmp_path / "missing.yaml")).load()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("validators: [unclosed\n")
        with pytest.raises(SpecConfigurationError):
            ValidatorSpecLoader(str(path)).load()

    def test_custom_table(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "validators:\n"
            "  Card:\n"
            "    kind: checksum\n"
            "    checksum_method: luhn_valid\n"
            "    valid: ['79927398713']\n"
            "    invalid: ['123']\n"
        )
        specs = ValidatorSpecLoader(str(path)).load()
        assert list(specs) == ["card"]
        assert specs["card"].valid_examples == ("79927398713",)
