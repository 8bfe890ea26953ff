#!/usr/bin/env python3
"""
Validator CLI.

Command-line tool for inspecting and running validators.

Usage:
    python -m modules.validation.cli list
    python -m modules.validation.cli show vin
    python -m modules.validation.cli validate isbn 978-3-16-148410-0
    python -m modules.validation.cli validate luhn "4111 1111 1111 1111" --json
    python -m modules.validation.cli batch hex_color "#fff" "#ggg"
    python -m modules.validation.cli extract "Visit https://example.com #python"
    python -m modules.validation.cli check
"""

import json
import sys
from typing import List, Optional

from modules.validation.engine import ValidationService, build_validation_service
from modules.validation.extraction import TokenExtractor
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


def list_validators(service: ValidationService) -> bool:
    """Print every validator with its schema tags."""
    metadata = service.metadata()
    print(f"{'SYMBOL':<18} {'KIND':<9} {'SCHEMA':<40}")
    print("-" * 68)
    for symbol, entry in metadata.items():
        kind = "regex" if entry["regex"] else "checksum"
        schema = f"{entry['schema_type']}/{entry['schema_property']}" if entry["schema_type"] else "-"
        print(f"{symbol:<18} {kind:<9} {schema:<40}")
    print(f"\nTotal: {len(metadata)} validators")
    return True


def show_validator(service: ValidationService, symbol: str) -> bool:
    entry = service.metadata(symbol)
    if entry is None:
        print(f"✗ Validator not found: {symbol}")
        return False
    print(json.dumps(entry, indent=2))
    return True


def show_examples(service: ValidationService, symbol: str) -> bool:
    examples = service.examples(symbol)
    if examples is None:
        print(f"✗ Validator not found: {symbol}")
        return False
    print("Valid:")
    for value in examples["valid"]:
        print(f"  {value!r}")
    print("Invalid:")
    for value in examples["invalid"]:
        print(f"  {value!r}")
    return True


def validate_value(service: ValidationService, symbol: str, value: str, as_json: bool = False) -> bool:
    """Validate one value. Returns True if the value is valid."""
    result = service.validate(symbol, value)

    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        print(f"✓ {value} is a valid {symbol}")
    else:
        print(f"✗ {value}: {'; '.join(result.errors)}")

    return result.valid


def batch_values(service: ValidationService, symbol: str, values: List[str]) -> bool:
    batch = service.batch_validate(symbol, values)
    for value, result in zip(values, batch.results):
        mark = "✓" if result.valid else "✗"
        suffix = "" if result.valid else f" ({'; '.join(result.errors)})"
        print(f"  {mark} {value}{suffix}")
    print(f"\n{sum(r.valid for r in batch.results)}/{len(batch)} valid")
    return batch.valid


def extract_tokens(service: ValidationService, text: str) -> bool:
    tokens = TokenExtractor(service).extract(text)
    print(json.dumps({kind: found for kind, found in tokens.items() if found}, indent=2))
    return True


def check_examples(service: ValidationService) -> bool:
    """
    Run every validator against its documented examples.

    Returns:
        True if every valid example passes and every invalid example fails
    """
    failures = []
    total = 0

    for symbol in service.list_symbols():
        examples = service.examples(symbol)
        for value in examples["valid"]:
            total += 1
            if not service.validate(symbol, value).valid:
                failures.append(f"{symbol}: expected valid: {value!r}")
        for value in examples["invalid"]:
            total += 1
            if service.validate(symbol, value).valid:
                failures.append(f"{symbol}: expected invalid: {value!r}")

    for failure in failures:
        print(f"✗ {failure}")

    if failures:
        print(f"\n{len(failures)} of {total} examples disagree with their validator")
        return False

    print(f"✓ All {total} examples agree with their validators")
    return True


def print_usage():
    """Print CLI usage information."""
    print("""
Validator CLI

Commands:
  list                              List all validators
  show <symbol>                     Show validator metadata
  examples <symbol>                 Show documented valid/invalid examples
  validate <symbol> <value> [--json]
                                    Validate a single value
  batch <symbol> <value> [...]      Validate several values
  extract <text>                    Extract tokens from text
  check                             Check every validator against its examples
  help                              Show this help message

Examples:
  python -m modules.validation.cli validate vin 1HGCM82633A004352
  python -m modules.validation.cli batch hex_color "#fff" "#ggg"
  python -m modules.validation.cli check
""")


def main(argv: Optional[List[str]] = None, service: Optional[ValidationService] = None) -> int:
    """Main CLI entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv:
        print_usage()
        return 1

    command = argv[0].lower()

    if command == "help":
        print_usage()
        return 0

    if service is None:
        service = build_validation_service()

    if command == "list":
        success = list_validators(service)
        return 0 if success else 1

    elif command in ("show", "examples"):
        if len(argv) < 2:
            print(f"Error: {command} requires <symbol>")
            return 1

        handler = show_validator if command == "show" else show_examples
        success = handler(service, argv[1])
        return 0 if success else 1

    elif command == "validate":
        as_json = "--json" in argv
        args = [a for a in argv[1:] if a != "--json"]
        if len(args) < 2:
            print("Error: validate requires <symbol> and <value>")
            print("Example: python -m modules.validation.cli validate isbn 978-3-16-148410-0")
            return 1

        success = validate_value(service, args[0], args[1], as_json=as_json)
        return 0 if success else 1

    elif command == "batch":
        if len(argv) < 3:
            print("Error: batch requires <symbol> and at least one value")
            return 1

        success = batch_values(service, argv[1], argv[2:])
        return 0 if success else 1

    elif command == "extract":
        if len(argv) < 2:
            print("Error: extract requires <text>")
            return 1

        success = extract_tokens(service, " ".join(argv[1:]))
        return 0 if success else 1

    elif command == "check":
        success = check_examples(service)
        return 0 if success else 1

    else:
        print(f"Unknown command: {command}")
        print_usage()
        return 1


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
