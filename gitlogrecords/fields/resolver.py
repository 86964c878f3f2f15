import logging
from typing import List, Optional, Tuple, Union
from gitlogrecords.fields.field_codes import FieldKind
from gitlogrecords.vcs.models import CommitRecord, DiffStats
from gitlogrecords.vcs.ref_index import ReferenceIndex
from gitlogrecords.utils.errors import DataError

logger = logging.getLogger(__name__)

Value = Union[str, int, List[str]]
OutputRecord = List[Tuple[str, Value]]

def decode_text(raw: bytes, error_message: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DataError(error_message) from e

def diff_value(diff_stats: Optional[DiffStats], attribute: str) -> str:
    # Missing stats render as an empty string, never as zero.
    if diff_stats is None:
        return ""
    return str(getattr(diff_stats, attribute))

def resolve(
    field: FieldKind,
    commit: CommitRecord,
    diff_stats: Optional[DiffStats],
    ref_index: Optional[ReferenceIndex],
    backend,
) -> Value:
    """
    Resolve one field of one commit to its output value.

    :param field: The parsed field kind.
    :param commit: The commit being reported.
    :param diff_stats: Stats against the previously visited commit, or None.
    :param ref_index: The reference index; `D` drains this commit's entry.
    :param backend: Used for abbreviated hashes.
    :return: A string, an integer or a list of strings.
    """
    if field == FieldKind.commit_hash:
        return commit.hexsha
    if field == FieldKind.abbreviated_commit_hash:
        return backend.abbreviate(commit.hexsha)
    if field == FieldKind.tree_hash:
        return commit.tree_hexsha
    if field == FieldKind.abbreviated_tree_hash:
        return backend.abbreviate(commit.tree_hexsha)
    if field == FieldKind.parent_hashes:
        return list(commit.parent_hexshas)
    if field == FieldKind.abbreviated_parent_hashes:
        return [backend.abbreviate(parent) for parent in commit.parent_hexshas]
    if field == FieldKind.author_name:
        return decode_text(commit.author_name, "Author name contains invalid UTF8")
    if field == FieldKind.author_email:
        return decode_text(commit.author_email, "Author email contains invalid UTF8")
    if field == FieldKind.author_time:
        return commit.author_time.seconds
    if field == FieldKind.author_time_iso:
        return commit.author_time.to_iso8601()
    if field == FieldKind.committer_time:
        return commit.committer_time.seconds
    if field == FieldKind.committer_time_iso:
        return commit.committer_time.to_iso8601()
    if field == FieldKind.ref_names:
        return ref_index.take(commit.hexsha) if ref_index is not None else []
    if field == FieldKind.summary:
        return decode_text(commit.summary, "Commit header contains invalid UTF8")
    if field == FieldKind.message:
        return decode_text(commit.message, "Commit message contains invalid UTF8")
    if field == FieldKind.files_changed:
        return diff_value(diff_stats, "files_changed")
    if field == FieldKind.insertions:
        return diff_value(diff_stats, "insertions")
    if field == FieldKind.deletions:
        return diff_value(diff_stats, "deletions")
    raise ValueError(f"Unhandled field kind: {field!r}")

def resolve_record(
    fields: List[FieldKind],
    commit: CommitRecord,
    diff_stats: Optional[DiffStats],
    ref_index: Optional[ReferenceIndex],
    backend,
) -> OutputRecord:
    """Resolve every requested field of a commit, in request order."""
    record = []
    for field in fields:
        try:
            record.append((field.code, resolve(field, commit, diff_stats, ref_index, backend)))
        except DataError as e:
            logger.error(f"Failed to resolve `{field.code}` for commit {commit.hexsha}: {e.message}")
            raise
    return record
