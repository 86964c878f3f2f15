import os
import logging
from pydantic import BaseModel, validator
from gitlogrecords.utils.enums import OutputFormat

logger = logging.getLogger(__name__)

# Environment variables, also read from a .env file by the CLI.
LOG_LEVEL_ENV = "LOG_LEVEL"
REPO_ENV = "GIT_LOG_RECORDS_REPO"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def default_repo_path() -> str:
    return os.environ.get(REPO_ENV, ".")

def configure_logging():
    """Configure the root logger from LOG_LEVEL. Log lines go to stderr, records to stdout."""
    log_level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, log_level, None)
    unknown = not isinstance(level, int)
    logging.basicConfig(level=logging.WARNING if unknown else level, format=LOG_FORMAT)
    if unknown:
        logger.warning(f"Unknown log level {log_level}, using {DEFAULT_LOG_LEVEL}")

class RunOptions(BaseModel):
    range_expr: str
    fields_input: str
    repo: str = "."
    output_format: OutputFormat = OutputFormat.json
    oldest_first: bool = False

    @validator("output_format", pre=True)
    def parse_output_format(cls, v):
        if isinstance(v, OutputFormat):
            return v
        return OutputFormat.from_string(str(v))
