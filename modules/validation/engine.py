"""
ValidationService - Main orchestrator for value validation.

This is the entry point the HTTP layer, the CLI and the token extractor call
into. It resolves validator units through the registry, caches results and
guards against validation loops (a rule that, directly or indirectly,
re-validates the same value).
"""

import hashlib
import threading
from typing import Any, Dict, List, Optional

from modules.validation.core.base import (
    BatchValidationResult,
    ResultCode,
    ValidationResult,
    ValidatorSpec,
)
from modules.validation.core.config_loader import load_validator_specs
from modules.validation.core.exceptions import SpecIncomplete, ValidatorNotFound
from modules.validation.core.registry import ValidatorRegistry, normalize_symbol
from modules.validation.storage import CacheBackend, create_cache_backend
from shared.utils.config import Settings, settings as default_settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

CACHE_KEY_PREFIX = "validator_result"
LOOP_KEY_PREFIX = "validation_loop"

LOOP_DETECTED_MESSAGE = "validation loop detected"
NOT_FOUND_MESSAGE = "validator not found"
INTERNAL_ERROR_MESSAGE = "validation failed: internal error"
VALUES_NOT_LIST_MESSAGE = "values must be a list"


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def cache_key_for(symbol: str, value: str) -> str:
    return f"{CACHE_KEY_PREFIX}:{symbol}:{_digest(value)}"


def loop_key_for(symbol: str, value: str) -> str:
    return f"{LOOP_KEY_PREFIX}:{symbol}:{_digest(value)}"


def _coerce(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class ValidationService:
    """
    Validation orchestrator.

    Flow for one value:
    1. Serve from cache if a live entry exists (no loop accounting)
    2. Atomically bump the loop counter; reject above the ceiling
    3. Resolve the unit and run it
    4. Attach JSON-LD to valid results, cache, release the loop counter

    Cache and loop-counter failures never reach the caller: they are logged
    and treated as a miss / zero attempts.

    Usage:
        service = build_validation_service()
        result = service.validate("isbn", "978-3-16-148410-0")

        if result.valid:
            print(result.jsonld)
    """

    def __init__(
        self,
        registry: ValidatorRegistry,
        cache_backend: CacheBackend,
        cache_ttl: Optional[int] = None,
        max_attempts: Optional[int] = None,
        loop_ttl: Optional[int] = None,
    ):
        self.registry = registry
        self.cache = cache_backend
        self.cache_ttl = cache_ttl or default_settings.CACHE_TTL_SECONDS
        self.max_attempts = max_attempts or default_settings.LOOP_GUARD_MAX_ATTEMPTS
        self.loop_ttl = loop_ttl or default_settings.LOOP_GUARD_TTL_SECONDS

        self._stats_lock = threading.Lock()
        self._stats = {
            "cache_hits": 0,
            "cache_misses": 0,
            "loop_rejections": 0,
            "backing_store_errors": 0,
        }

        logger.info(
            f"ValidationService initialized with {len(registry)} validators "
            f"({cache_backend.backend_name})"
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, symbol, value: Any, cache_ttl: Optional[int] = None) -> ValidationResult:
        """
        Validate one value against a rule.

        Args:
            symbol: Rule name (e.g. "vin")
            value: Value to check; non-strings are converted with str()
            cache_ttl: Cache lifetime for this result in seconds

        Returns:
            ValidationResult. Unknown rules, loop rejections and internal
            failures come back as invalid results with ``code`` set.
        """
        symbol = normalize_symbol(symbol)
        value = _coerce(value)

        cache_key = cache_key_for(symbol, value)
        cached = self._cache_get(cache_key)
        if cached is not None:
            self._count("cache_hits")
            return cached
        self._count("cache_misses")

        loop_key = loop_key_for(symbol, value)
        attempts = self._loop_enter(loop_key)
        try:
            if attempts is not None and attempts > self.max_attempts:
                self._count("loop_rejections")
                logger.warning(
                    f"Validation loop detected for '{symbol}' "
                    f"({attempts - 1} attempts in flight)"
                )
                return ValidationResult.failure(LOOP_DETECTED_MESSAGE, ResultCode.LOOP_DETECTED)

            result = self._run(symbol, value)
            if result.code is None:
                self._cache_set(cache_key, result, cache_ttl or self.cache_ttl)
            return result
        finally:
            if attempts is not None:
                self._loop_exit(loop_key)

    def _run(self, symbol: str, value: str) -> ValidationResult:
        try:
            unit = self.registry.resolve(symbol)
        except ValidatorNotFound:
            return ValidationResult.failure(NOT_FOUND_MESSAGE, ResultCode.NOT_FOUND)
        except SpecIncomplete as e:
            logger.error(str(e))
            return ValidationResult.failure(NOT_FOUND_MESSAGE, ResultCode.NOT_FOUND)

        try:
            result = unit.validate(value)
        except Exception as e:
            logger.error(f"Validator '{symbol}' raised: {e}", exc_info=True)
            return ValidationResult.failure(INTERNAL_ERROR_MESSAGE, ResultCode.INTERNAL_ERROR)

        if result.valid:
            jsonld = unit.spec.to_jsonld(value)
            if jsonld is not None:
                result = ValidationResult(valid=True, errors=[], jsonld=jsonld)
        return result

    def batch_validate(self, symbol, values: Any) -> BatchValidationResult:
        """
        Validate many values against one rule, preserving order.

        Args:
            symbol: Rule name
            values: List of values

        Returns:
            BatchValidationResult; ``valid`` is True only if every item is
            valid (an empty list is valid)
        """
        if not isinstance(values, (list, tuple)):
            return BatchValidationResult(valid=False, results=[], errors=[VALUES_NOT_LIST_MESSAGE])

        results = [self.validate(symbol, v) for v in values]
        return BatchValidationResult(valid=all(r.valid for r in results), results=results)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def list_symbols(self) -> List[str]:
        return self.registry.list_symbols()

    def has(self, symbol) -> bool:
        return self.registry.has(symbol)

    def get_spec(self, symbol) -> ValidatorSpec:
        return self.registry.get_spec(symbol)

    def regex(self, symbol) -> Optional[str]:
        """
        Regex source bound to a rule, or None for checksum rules.

        Raises:
            ValidatorNotFound: If the symbol is unknown
        """
        self.registry.get_spec(symbol)
        try:
            return self.registry.resolve(symbol).regex
        except SpecIncomplete:
            return None

    def metadata(self, symbol=None) -> Any:
        """
        Describe one rule, or all rules keyed by symbol.

        Returns:
            Dict with symbol, schema_type, schema_property, description,
            regex, valid, invalid. None if ``symbol`` is unknown.
        """
        if symbol is not None:
            spec = self.registry.find_spec(symbol)
            return self._describe(spec) if spec else None
        return {spec.symbol: self._describe(spec) for spec in self.registry.specs()}

    def _describe(self, spec: ValidatorSpec) -> Dict[str, Any]:
        return {
            "symbol": spec.symbol,
            "schema_type": spec.schema_type,
            "schema_property": spec.schema_property,
            "description": spec.description,
            "regex": self.regex(spec.symbol),
            "valid": list(spec.valid_examples),
            "invalid": list(spec.invalid_examples),
        }

    def examples(self, symbol) -> Optional[Dict[str, List[str]]]:
        spec = self.registry.find_spec(symbol)
        if spec is None:
            return None
        return {"valid": list(spec.valid_examples), "invalid": list(spec.invalid_examples)}

    def fields(self) -> List[str]:
        """Alias for list_symbols()."""
        return self.list_symbols()

    def jsonld(self, symbol, value: Any) -> Optional[Dict[str, Any]]:
        """
        schema.org JSON-LD for a value under a rule's schema tags.

        The value is not validated. None when the rule is unknown or has
        no schema tags.
        """
        spec = self.registry.find_spec(symbol)
        if spec is None:
            return None
        return spec.to_jsonld(_coerce(value))

    def help(self) -> Dict[str, Any]:
        return {
            "description": "Validator engine: rule metadata, examples, regex, validation with caching and loop protection.",
            "methods": {
                "metadata": "metadata(symbol=None) => {symbol, schema_type, schema_property, description, regex, valid, invalid}",
                "validators": "list_symbols() => [symbols]",
                "fields": "fields() => [symbols] (alias for validators)",
                "examples": "examples(symbol) => {valid: [...], invalid: [...]}",
                "regex": "regex(symbol) => regex source or None",
                "validate": "validate(symbol, value, cache_ttl=None) => {valid, errors, jsonld}",
                "batch_validate": "batch_validate(symbol, values) => {valid, results: [...]}",
                "jsonld": "jsonld(symbol, value) => JSON-LD dict or None",
            },
        }

    # ------------------------------------------------------------------
    # Cache administration
    # ------------------------------------------------------------------

    def clear_cache(self, symbol, value: Any) -> None:
        """Evict the cached result and loop counter for one (symbol, value)."""
        symbol = normalize_symbol(symbol)
        value = _coerce(value)
        for key in (cache_key_for(symbol, value), loop_key_for(symbol, value)):
            try:
                self.cache.delete(key)
            except Exception as e:
                self._backing_store_failed("delete", key, e)

    def stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            data = dict(self._stats)
        total = data["cache_hits"] + data["cache_misses"]
        data["hit_rate_percent"] = round(data["cache_hits"] / total * 100, 2) if total else 0
        data["backend"] = self.cache.backend_name
        return data

    # ------------------------------------------------------------------
    # Backing store access (fail open)
    # ------------------------------------------------------------------

    def _count(self, name: str) -> None:
        with self._stats_lock:
            self._stats[name] += 1

    def _backing_store_failed(self, operation: str, key: str, error: Exception) -> None:
        self._count("backing_store_errors")
        logger.warning(f"Backing store {operation} failed for {key}: {error}")

    def _cache_get(self, key: str) -> Optional[ValidationResult]:
        try:
            cached = self.cache.get(key)
        except Exception as e:
            self._backing_store_failed("get", key, e)
            return None
        if not isinstance(cached, dict):
            return None
        try:
            return ValidationResult.from_dict(cached)
        except (KeyError, TypeError):
            logger.warning(f"Ignoring malformed cache entry: {key}")
            return None

    def _cache_set(self, key: str, result: ValidationResult, ttl: int) -> None:
        try:
            self.cache.set(key, result.to_dict(), ttl)
        except Exception as e:
            self._backing_store_failed("set", key, e)

    def _loop_enter(self, key: str) -> Optional[int]:
        try:
            return self.cache.incr(key, self.loop_ttl)
        except Exception as e:
            self._backing_store_failed("incr", key, e)
            return None

    def _loop_exit(self, key: str) -> None:
        try:
            self.cache.decr(key)
        except Exception as e:
            self._backing_store_failed("decr", key, e)


def build_validation_service(
    settings: Optional[Settings] = None,
    cache_backend: Optional[CacheBackend] = None,
) -> ValidationService:
    """
    Build a ValidationService from settings.

    Loads the spec table, verifies every rule resolves, and wires the
    configured cache backend.

    Raises:
        SpecConfigurationError: If the spec table cannot be loaded
        SpecIncomplete: If a rule cannot be bound
    """
    settings = settings or default_settings
    registry = ValidatorRegistry(load_validator_specs(settings.VALIDATOR_SPEC_PATH))
    registry.verify_all()

    return ValidationService(
        registry=registry,
        cache_backend=cache_backend if cache_backend is not None else create_cache_backend(settings),
        cache_ttl=settings.CACHE_TTL_SECONDS,
        max_attempts=settings.LOOP_GUARD_MAX_ATTEMPTS,
        loop_ttl=settings.LOOP_GUARD_TTL_SECONDS,
    )
