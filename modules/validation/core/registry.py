"""
Validator registry.

Maps a rule symbol to a ready-to-use ValidatorUnit. Units are built lazily
from the spec table on first use and memoized for the registry's lifetime.
This is the only place where rule kind dispatch happens.
"""

import threading
from typing import Dict, List, Mapping, Optional

from modules.validation import checksums, patterns
from modules.validation.core.base import RuleKind, ValidatorSpec, ValidatorUnit
from modules.validation.core.exceptions import SpecIncomplete, ValidatorNotFound
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


def normalize_symbol(symbol) -> str:
    """Accept ``"vin"``, ``"VIN"`` or ``":vin"``."""
    return str(symbol).strip().lstrip(":").lower()


class ValidatorRegistry:
    """
    Registry of validator units built from a spec table.

    Usage:
        registry = ValidatorRegistry(load_validator_specs())
        unit = registry.resolve("vin")
        unit.validate("1HGCM82633A004352")
    """

    def __init__(self, specs: Mapping[str, ValidatorSpec]):
        self._specs = specs
        self._units: Dict[str, ValidatorUnit] = {}
        self._lock = threading.Lock()

    def resolve(self, symbol) -> ValidatorUnit:
        """
        Get the executable unit for a symbol.

        Args:
            symbol: Rule name

        Returns:
            Memoized ValidatorUnit

        Raises:
            ValidatorNotFound: If the symbol is not in the table
            SpecIncomplete: If neither a checksum nor a regex can be bound
        """
        key = normalize_symbol(symbol)

        unit = self._units.get(key)
        if unit is not None:
            return unit

        spec = self._specs.get(key)
        if spec is None:
            raise ValidatorNotFound(key)

        with self._lock:
            unit = self._units.get(key)
            if unit is None:
                unit = self._build(spec)
                self._units[key] = unit
                logger.debug(f"Built validator unit: {key} ({unit.kind.value})")
        return unit

    def _build(self, spec: ValidatorSpec) -> ValidatorUnit:
        if spec.kind == RuleKind.CHECKSUM:
            func = checksums.get_checksum_method(spec.checksum_method)
            if func is None:
                raise SpecIncomplete(
                    spec.symbol, f"unknown checksum method '{spec.checksum_method}'"
                )
            return ValidatorUnit(spec=spec, checksum=func)

        pattern_name = spec.pattern or patterns.convention_pattern_name(spec.symbol)
        matcher = patterns.get_pattern(pattern_name)
        if matcher is None:
            raise SpecIncomplete(spec.symbol, f"no pattern named '{pattern_name}'")
        return ValidatorUnit(spec=spec, matcher=matcher)

    def get_spec(self, symbol) -> ValidatorSpec:
        key = normalize_symbol(symbol)
        spec = self._specs.get(key)
        if spec is None:
            raise ValidatorNotFound(key)
        return spec

    def find_spec(self, symbol) -> Optional[ValidatorSpec]:
        return self._specs.get(normalize_symbol(symbol))

    def has(self, symbol) -> bool:
        return normalize_symbol(symbol) in self._specs

    def list_symbols(self) -> List[str]:
        """All known symbols, in table order."""
        return list(self._specs.keys())

    # Discovery alias
    list = list_symbols

    def specs(self) -> List[ValidatorSpec]:
        return [self._specs[s] for s in self._specs]

    def verify_all(self) -> int:
        """
        Resolve every spec in the table.

        Run once at startup so a malformed rule fails fast instead of at
        request time.

        Returns:
            Number of units resolved

        Raises:
            SpecIncomplete: For the first rule that cannot be bound
        """
        for symbol in self._specs:
            self.resolve(symbol)
        logger.info(f"Verified {len(self._specs)} validators")
        return len(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, symbol) -> bool:
        return self.has(symbol)
