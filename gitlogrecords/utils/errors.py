class RecordsError(Exception):
    """Base exception for every failure that aborts a run."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class ConfigurationError(RecordsError):
    """Raised for bad run options, before any commit is processed."""

class RangeError(ConfigurationError):
    """Raised when git cannot parse the revision range."""

    def __init__(self, range_expr: str, detail: str = ""):
        self.range_expr = range_expr
        message = f"Invalid revision range `{range_expr}`"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

class RepositoryError(RecordsError):
    """Raised when the repository cannot be opened or its refs cannot be read."""

class UnsupportedFieldError(RecordsError):
    """Raised for a field code that is unknown or deliberately not implemented."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"Invalid format `{code}`: {reason}")

class DataError(RecordsError):
    """Raised when a commit's data cannot be turned into a field value."""
