import sys
import json
import logging
from typing import Iterable, Optional, TextIO
from gitlogrecords.fields.resolver import OutputRecord, Value
from gitlogrecords.utils.enums import OutputFormat

logger = logging.getLogger(__name__)

def to_json(value) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

def json_line(record: OutputRecord) -> str:
    """
    Serialize a record as one compact JSON object.

    Built pair by pair so that key order and duplicated keys survive.
    """
    members = [f"{to_json(code)}:{to_json(value)}" for code, value in record]
    return "{" + ",".join(members) + "}"

def csv_value(value: Value) -> str:
    if isinstance(value, list):
        return to_json(value)
    return str(value)

def csv_header(record: OutputRecord) -> str:
    return ",".join(code for code, _ in record)

def csv_line(record: OutputRecord) -> str:
    # Values are not quoted or escaped; a comma inside a value shifts the columns.
    return ",".join(csv_value(value) for _, value in record)

class RowEmitter:
    """Writes records to a text stream as JSON lines or CSV, one line per commit."""

    def __init__(self, output_format: OutputFormat, stream: Optional[TextIO] = None):
        self.output_format = output_format
        self.stream = stream if stream is not None else sys.stdout
        self.rows_written = 0

    def _write_line(self, line: str):
        self.stream.write(line + "\n")
        self.stream.flush()

    def emit(self, record: OutputRecord):
        if self.output_format == OutputFormat.csv:
            if self.rows_written == 0:
                self._write_line(csv_header(record))
            self._write_line(csv_line(record))
        else:
            self._write_line(json_line(record))
        self.rows_written += 1

    def emit_all(self, records: Iterable[OutputRecord]) -> int:
        for record in records:
            self.emit(record)
        logger.info(f"Emitted {self.rows_written} {self.output_format.value} rows")
        return self.rows_written
