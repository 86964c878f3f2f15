from enum import Enum
from gitlogrecords.utils.errors import ConfigurationError

class OutputFormat(str, Enum):
    json = "json"
    csv = "csv"

    @classmethod
    def from_string(cls, value: str) -> "OutputFormat":
        """Case-insensitive lookup, so `JSON` and `Csv` are accepted."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigurationError("Only JSON and CSV outputs are supported.")
