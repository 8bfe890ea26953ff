"""
Custom exceptions for the validation module.

A value failing its rule is not an exception: it is a normal
ValidationResult with valid=False.
"""


class ValidatorEngineException(Exception):
    """Base exception for the validator engine."""
    pass


class SpecConfigurationError(ValidatorEngineException):
    """Exception raised when the validator spec table is malformed."""
    pass


class SpecIncomplete(ValidatorEngineException):
    """Exception raised when a spec resolves to neither a pattern nor a checksum."""

    def __init__(self, symbol: str, detail: str = ""):
        self.symbol = symbol
        message = f"Validator '{symbol}' has neither a checksum method nor a regex"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ValidatorNotFound(ValidatorEngineException):
    """Exception raised when a symbol is not in the spec table."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Validator not found: {symbol}")


class LoopDetected(ValidatorEngineException):
    """Exception raised when the loop guard attempt ceiling is reached."""

    def __init__(self, symbol: str, retry_after: int = 0):
        self.symbol = symbol
        self.retry_after = retry_after
        super().__init__(f"Validation loop detected for '{symbol}'")


class RateLimitExceeded(ValidatorEngineException):
    """Exception raised when a client exceeds its request budget."""

    def __init__(self, limit: int, window: int, retry_after: int = 0):
        self.limit = limit
        self.window = window
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded: {limit} requests per {window} seconds"
        )


class BackingStoreUnavailable(ValidatorEngineException):
    """Exception raised by cache backends when the store cannot be reached."""
    pass
