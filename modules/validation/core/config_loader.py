"""
Validator spec table loader.

Loads the declarative validator table from YAML and turns every entry into
an immutable ValidatorSpec.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from modules.validation.core.base import RuleKind, ValidatorSpec
from modules.validation.core.exceptions import SpecConfigurationError
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_SPEC_PATH = Path(__file__).parent.parent / "config" / "validators.yaml"

_KNOWN_KEYS = {
    "kind", "pattern", "checksum_method", "type", "schema_type",
    "schema_property", "description", "error_message", "valid", "invalid",
}


class ValidatorSpecLoader:
    """
    Loads validator specs from a YAML file.

    Supports:
    - Regex and checksum rules
    - Schema presets (``type: product`` etc.) that default schema tags
    - Documented valid / invalid example sets
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize spec loader.

        Args:
            config_path: Path to the validator table YAML file.
                        If None, uses the table shipped with the package.
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_SPEC_PATH

    def load_raw(self) -> Dict[str, Any]:
        """
        Read and parse the YAML file.

        Raises:
            SpecConfigurationError: If the file is missing or is not valid YAML
        """
        if not self.config_path.exists():
            raise SpecConfigurationError(f"Validator spec table not found: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse validator spec table: {e}")
            raise SpecConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise SpecConfigurationError("Validator spec table must be a mapping")

        return data

    def load(self) -> Mapping[str, ValidatorSpec]:
        """
        Load the table as a read-only mapping of symbol -> ValidatorSpec.

        Returns:
            MappingProxyType keyed by symbol
        """
        raw = self.load_raw()
        presets = raw.get("presets") or {}
        entries = raw.get("validators") or {}

        if not isinstance(entries, dict):
            raise SpecConfigurationError("'validators' must be a mapping of symbol -> definition")

        specs = {
            str(symbol).lower(): build_spec(str(symbol).lower(), definition, presets)
            for symbol, definition in entries.items()
        }

        logger.info(f"Loaded {len(specs)} validator specs from: {self.config_path}")
        return MappingProxyType(specs)


def _examples(symbol: str, definition: Dict[str, Any], key: str):
    values = definition.get(key) or []
    if not isinstance(values, list):
        raise SpecConfigurationError(f"Validator '{symbol}': '{key}' must be a list")
    return tuple("" if v is None else str(v) for v in values)


def build_spec(symbol: str, definition: Any, presets: Optional[Dict[str, Any]] = None) -> ValidatorSpec:
    """
    Build one ValidatorSpec from its YAML definition.

    Args:
        symbol: Rule name
        definition: Mapping read from the table
        presets: Named presets providing default schema tags

    Returns:
        ValidatorSpec

    Raises:
        SpecConfigurationError: On unknown kind, preset or keys
    """
    if not isinstance(definition, dict):
        raise SpecConfigurationError(f"Validator '{symbol}' must be a mapping")

    unknown = set(definition) - _KNOWN_KEYS
    if unknown:
        raise SpecConfigurationError(
            f"Validator '{symbol}' has unknown keys: {', '.join(sorted(unknown))}"
        )

    try:
        kind = RuleKind(definition.get("kind", "regex"))
    except ValueError:
        raise SpecConfigurationError(
            f"Validator '{symbol}' has unknown kind: {definition.get('kind')}"
        )

    preset: Dict[str, Any] = {}
    preset_name = definition.get("type")
    if preset_name:
        presets = presets or {}
        if preset_name not in presets:
            raise SpecConfigurationError(f"Validator '{symbol}' uses unknown type: {preset_name}")
        preset = presets[preset_name] or {}

    schema_type = definition.get("schema_type", preset.get("schema_type"))
    schema_property = definition.get("schema_property", preset.get("schema_property"))

    description = definition.get("description")
    if not description:
        description = (
            f"{schema_type} (schema.org/{schema_type}/{schema_property})"
            if schema_type and schema_property else symbol
        )

    # A checksum rule never carries a pattern and vice versa
    pattern = definition.get("pattern") if kind == RuleKind.REGEX else None
    checksum_method = definition.get("checksum_method") if kind == RuleKind.CHECKSUM else None

    return ValidatorSpec(
        symbol=symbol,
        kind=kind,
        pattern=pattern,
        checksum_method=checksum_method,
        schema_type=schema_type,
        schema_property=schema_property,
        description=description,
        error_message=definition.get("error_message") or "is invalid",
        valid_examples=_examples(symbol, definition, "valid"),
        invalid_examples=_examples(symbol, definition, "invalid"),
    )


def load_validator_specs(config_path: Optional[str] = None) -> Mapping[str, ValidatorSpec]:
    """
    Convenience function to load the validator table.

    Args:
        config_path: Optional path to the YAML file

    Returns:
        Read-only mapping of symbol -> ValidatorSpec
    """
    return ValidatorSpecLoader(config_path).load()
