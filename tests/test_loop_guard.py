"""
Tests for loop protection.

The loop guard bounds how many validations of the same (symbol, value)
may be in flight at once, whether they come from concurrent callers or
from a rule that re-enters the service.
"""

import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait

import pytest

from modules.validation import checksums
from modules.validation.core.base import ResultCode, RuleKind, ValidatorSpec
from modules.validation.core.registry import ValidatorRegistry
from modules.validation.engine import ValidationService, loop_key_for
from modules.validation.storage import MemoryCacheBackend, NullCacheBackend

MAX_ATTEMPTS = 5


def _service_with_rule(monkeypatch, name, func, backend=None):
    monkeypatch.setitem(checksums.CHECKSUM_METHODS, name, func)
    specs = {name: ValidatorSpec(symbol=name, kind=RuleKind.CHECKSUM, checksum_method=name)}
    return ValidationService(
        ValidatorRegistry(specs),
        backend if backend is not None else MemoryCacheBackend(),
        max_attempts=MAX_ATTEMPTS,
        loop_ttl=60,
    )


@pytest.mark.parametrize("backend_cls", [MemoryCacheBackend, NullCacheBackend])
def test_concurrent_calls_beyond_ceiling_are_rejected(monkeypatch, backend_cls):
    """MAX_ATTEMPTS + 1 concurrent calls: at least one is rejected."""
    release = threading.Event()
    entered = []

    def blocking(value):
        entered.append(value)
        release.wait(timeout=10)
        return True

    service = _service_with_rule(monkeypatch, "blocking", blocking, backend_cls())

    with ThreadPoolExecutor(max_workers=MAX_ATTEMPTS + 1) as pool:
        futures = [pool.submit(service.validate, "blocking", "same") for _ in range(MAX_ATTEMPTS + 1)]

        # Everyone but the rejected call is parked inside the rule
        done, _ = wait(futures, timeout=10, return_when=FIRST_COMPLETED)
        release.set()
        results = [f.result(timeout=10) for f in futures]

    assert done
    rejected = [r for r in results if r.code == ResultCode.LOOP_DETECTED]
    assert len(rejected) >= 1
    assert rejected[0].errors == ["validation loop detected"]
    assert rejected[0].valid is False
    assert len(entered) <= MAX_ATTEMPTS
    assert service.stats()["loop_rejections"] == len(rejected)


def test_ceiling_is_not_reached_by_sequential_calls(monkeypatch):
    """Completed validations release their slot."""
    service = _service_with_rule(monkeypatch, "ok", lambda value: True, NullCacheBackend())
    for _ in range(MAX_ATTEMPTS * 3):
        assert service.validate("ok", "same").valid


def test_recursive_rule_is_stopped(monkeypatch):
    """A rule that re-validates its own input terminates with a loop error."""
    seen = []
    holder = {}

    def recursive(value):
        result = holder["service"].validate("recursive", value)
        seen.append(result)
        return result.valid

    service = _service_with_rule(monkeypatch, "recursive", recursive)
    holder["service"] = service

    result = service.validate("recursive", "x")

    assert result.valid is False
    assert seen[0].code == ResultCode.LOOP_DETECTED
    # one call per allowed slot entered the rule
    assert len(seen) == MAX_ATTEMPTS
    # counter fully released once the stack unwinds
    assert service.cache.get(loop_key_for("recursive", "x")) is None


def test_loop_rejection_is_not_cached(monkeypatch):
    backend = MemoryCacheBackend()
    service = _service_with_rule(monkeypatch, "ok", lambda value: True, backend)

    key = loop_key_for("ok", "v")
    for _ in range(MAX_ATTEMPTS):
        backend.incr(key, 60)

    assert service.validate("ok", "v").code == ResultCode.LOOP_DETECTED

    # once in-flight validations finish, the value validates normally
    for _ in range(MAX_ATTEMPTS):
        backend.decr(key)
    assert service.validate("ok", "v").valid


def test_cache_hits_bypass_loop_accounting(monkeypatch):
    backend = MemoryCacheBackend()
    service = _service_with_rule(monkeypatch, "ok", lambda value: True, backend)
    assert service.validate("ok", "v").valid

    key = loop_key_for("ok", "v")
    for _ in range(MAX_ATTEMPTS):
        backend.incr(key, 60)

    result = service.validate("ok", "v")
    assert result.valid
    assert result.code is None
