from datetime import datetime, timedelta, timezone
from pydantic import BaseModel
from typing import List, Optional
from gitlogrecords.utils.errors import DataError

class GitTime(BaseModel):
    seconds: int
    offset_minutes: int

    def to_iso8601(self) -> str:
        """Render the timestamp in its stored UTC offset, e.g. 2023-11-14T23:13:20+01:00."""
        try:
            tz = timezone(timedelta(minutes=self.offset_minutes))
            return datetime.fromtimestamp(self.seconds, tz).isoformat()
        except (ValueError, OverflowError, OSError) as e:
            raise DataError(
                f"Commit time has an invalid UTC offset or timestamp: {self.seconds} {self.offset_minutes:+d}min"
            ) from e

class CommitRecord(BaseModel):
    # Text fields stay as raw bytes; they are decoded when a field asks for them.
    hexsha: str
    tree_hexsha: str
    parent_hexshas: List[str] = []
    author_name: bytes
    author_email: bytes
    author_time: GitTime
    committer_time: GitTime
    message: bytes

    @property
    def summary(self) -> bytes:
        """
        First paragraph of the message on a single line.

        Leading whitespace is skipped and the scan stops at a newline followed by
        another newline or by the end of the message. A whitespace run holding a
        newline becomes one space, any other run is kept as is, and a trailing
        run is dropped.
        """
        message = self.message.lstrip()
        summary = bytearray()
        space = bytearray()
        for index in range(len(message)):
            char = message[index:index + 1]
            if char == b"\n" and message[index + 1:index + 2] in (b"", b"\n"):
                break
            if char.isspace():
                space += char
                continue
            if space:
                summary += b" " if b"\n" in space else space
                space = bytearray()
            summary += char
        return bytes(summary)

class DiffStats(BaseModel):
    files_changed: int
    insertions: int
    deletions: int

class WalkStep(BaseModel):
    commit: CommitRecord
    diff_stats: Optional[DiffStats] = None
