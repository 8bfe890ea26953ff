"""
Base data models for the validator engine.

- RuleKind: how a rule is executed (regex or checksum)
- ValidatorSpec: declarative, immutable description of one rule
- ValidatorUnit: the resolved, executable form of a spec
- ValidationResult / BatchValidationResult: outcomes returned to callers
"""

import copy
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple


class RuleKind(str, Enum):
    """Execution strategy of a validator"""
    REGEX = "regex"
    CHECKSUM = "checksum"


class ResultCode(str, Enum):
    """Why a result was produced without (or despite) running the rule"""
    NOT_FOUND = "not_found"
    LOOP_DETECTED = "loop_detected"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ValidatorSpec:
    """
    Declarative description of one validation rule.

    Built once from the spec table and never modified afterwards.
    A regex spec may leave ``pattern`` empty; the registry then falls back
    to the naming convention ``SYMBOL_UPPER + "_REGEX"``.
    """
    symbol: str
    kind: RuleKind
    pattern: Optional[str] = None
    checksum_method: Optional[str] = None
    schema_type: Optional[str] = None
    schema_property: Optional[str] = None
    description: str = ""
    error_message: str = "is invalid"
    valid_examples: Tuple[str, ...] = ()
    invalid_examples: Tuple[str, ...] = ()

    def to_jsonld(self, value: Any) -> Optional[Dict[str, Any]]:
        """Minimal schema.org JSON-LD for a value, or None without schema tags."""
        if not (self.schema_type and self.schema_property):
            return None
        return {
            "@context": "https://schema.org",
            "@type": self.schema_type,
            self.schema_property: value,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation call.

    ``code`` is not part of the public payload; it tells the HTTP layer
    why a result was produced without evaluating the rule.
    """
    valid: bool
    errors: List[str] = dataclass_field(default_factory=list)
    jsonld: Optional[Dict[str, Any]] = None
    code: Optional[ResultCode] = dataclass_field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "jsonld": copy.deepcopy(self.jsonld),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationResult":
        """Rebuild a result from its serialized form (cache reads)"""
        return cls(
            valid=bool(data["valid"]),
            errors=list(data.get("errors") or []),
            jsonld=copy.deepcopy(data.get("jsonld")),
        )

    @classmethod
    def failure(cls, message: str, code: Optional[ResultCode] = None) -> "ValidationResult":
        return cls(valid=False, errors=[message], code=code)


@dataclass(frozen=True)
class BatchValidationResult:
    """Per-item results of a batch call plus the aggregate verdict"""
    valid: bool
    results: List[ValidationResult] = dataclass_field(default_factory=list)
    errors: List[str] = dataclass_field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data: Dict[str, Any] = {
            "valid": self.valid,
            "results": [r.to_dict() for r in self.results],
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


@dataclass(frozen=True)
class ValidatorUnit:
    """
    Executable validator bound to exactly one of a compiled pattern or a
    checksum function. Stateless and safe to share between threads.
    """
    spec: ValidatorSpec
    matcher: Optional[Pattern] = None
    checksum: Optional[Callable[[str], bool]] = None

    def __post_init__(self):
        if (self.matcher is None) == (self.checksum is None):
            raise ValueError(
                f"ValidatorUnit '{self.spec.symbol}' needs exactly one of matcher/checksum"
            )

    @property
    def symbol(self) -> str:
        return self.spec.symbol

    @property
    def kind(self) -> RuleKind:
        return RuleKind.REGEX if self.matcher is not None else RuleKind.CHECKSUM

    @property
    def regex(self) -> Optional[str]:
        """Source of the bound pattern, None for checksum units"""
        return self.matcher.pattern if self.matcher is not None else None

    def is_valid(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        if self.matcher is not None:
            return self.matcher.match(value) is not None
        return bool(self.checksum(value))

    def validate(self, value: Any) -> ValidationResult:
        """
        Run the rule against a value.

        Args:
            value: Raw value as supplied by the caller

        Returns:
            ValidationResult with an empty error list when the value passes
        """
        if self.is_valid(value):
            return ValidationResult(valid=True, errors=[])
        return ValidationResult(valid=False, errors=[f"Value {self.spec.error_message}"])
