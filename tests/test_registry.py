"""
Tests for the validator registry.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType

import pytest

from modules.validation import checksums
from modules.validation.core.base import RuleKind, ValidatorSpec, ValidatorUnit
from modules.validation.core.exceptions import SpecIncomplete, ValidatorNotFound
from modules.validation.core.registry import ValidatorRegistry, normalize_symbol


def test_resolve_checksum_rule(registry):
    unit = registry.resolve("vin")
    assert unit.kind == RuleKind.CHECKSUM
    assert unit.regex is None
    assert unit.validate("1HGCM82633A004352").valid


def test_resolve_regex_rule_by_convention(registry):
    # uuid names no pattern; UUID_REGEX is found by convention
    unit = registry.resolve("uuid")
    assert unit.kind == RuleKind.REGEX
    assert unit.regex is not None
    assert unit.validate("123e4567-e89b-12d3-a456-426614174000").valid


def test_resolve_is_memoized(registry):
    assert registry.resolve("isbn") is registry.resolve("isbn")


@pytest.mark.parametrize("symbol", ["vin", "VIN", ":vin", " vin "])
def test_symbol_normalization(registry, symbol):
    assert normalize_symbol(symbol) == "vin"
    assert registry.resolve(symbol).symbol == "vin"


def test_unknown_symbol(registry):
    with pytest.raises(ValidatorNotFound) as exc_info:
        registry.resolve("nope")
    assert exc_info.value.symbol == "nope"
    assert not registry.has("nope")


def test_list_and_discovery(registry, specs):
    assert registry.list() == list(specs.keys())
    assert registry.list_symbols() == registry.list()
    assert len(registry) == 16
    assert "iban" in registry
    assert registry.get_spec("iban").schema_type == "BankAccount"


def test_verify_all(registry):
    assert registry.verify_all() == 16


def test_spec_incomplete_regex():
    specs = MappingProxyType({"zip": ValidatorSpec(symbol="zip", kind=RuleKind.REGEX)})
    registry = ValidatorRegistry(specs)
    with pytest.raises(SpecIncomplete):
        registry.resolve("zip")
    with pytest.raises(SpecIncomplete):
        registry.verify_all()


def test_spec_incomplete_checksum():
    specs = {"card": ValidatorSpec(symbol="card", kind=RuleKind.CHECKSUM, checksum_method="missing")}
    with pytest.raises(SpecIncomplete):
        ValidatorRegistry(specs).resolve("card")


def test_unit_requires_exactly_one_executor():
    spec = ValidatorSpec(symbol="x", kind=RuleKind.REGEX)
    with pytest.raises(ValueError):
        ValidatorUnit(spec=spec)


def test_concurrent_first_use_builds_one_unit(specs, monkeypatch):
    """Many threads resolving the same symbol at once share one unit."""
    registry = ValidatorRegistry(specs)
    builds = []
    original_build = registry._build
    start = threading.Barrier(16)

    def counting_build(spec):
        builds.append(spec.symbol)
        return original_build(spec)

    monkeypatch.setattr(registry, "_build", counting_build)

    def resolve():
        start.wait(timeout=5)
        return registry.resolve("iban")

    with ThreadPoolExecutor(max_workers=16) as pool:
        units = list(pool.map(lambda _: resolve(), range(16)))

    assert builds == ["iban"]
    assert all(unit is units[0] for unit in units)


def test_registered_checksum_method(monkeypatch):
    monkeypatch.setitem(checksums.CHECKSUM_METHODS, "always_true", lambda value: True)
    specs = {"any": ValidatorSpec(symbol="any", kind=RuleKind.CHECKSUM, checksum_method="always_true")}
    assert ValidatorRegistry(specs).resolve("any").validate("whatever").valid
