import logging
from enum import Enum
from pydantic import BaseModel
from typing import List, Union
from gitlogrecords.utils.errors import UnsupportedFieldError

logger = logging.getLogger(__name__)

class FieldKind(str, Enum):
    commit_hash = "H"
    abbreviated_commit_hash = "h"
    tree_hash = "T"
    abbreviated_tree_hash = "t"
    parent_hashes = "P"
    abbreviated_parent_hashes = "p"
    author_name = "an"
    author_email = "ae"
    author_time = "at"
    author_time_iso = "aI"
    committer_time = "ct"
    committer_time_iso = "cI"
    ref_names = "D"
    summary = "s"
    message = "B"
    files_changed = "df"
    insertions = "di"
    deletions = "dd"

    @property
    def needs_diff(self) -> bool:
        return self in DIFF_FIELDS

    @property
    def code(self) -> str:
        return self.value

DIFF_FIELDS = frozenset({FieldKind.files_changed, FieldKind.insertions, FieldKind.deletions})

class UnsupportedField(BaseModel):
    code: str
    reason: str

    def reject(self):
        raise UnsupportedFieldError(self.code, self.reason)

MAILMAP_REASON = "Mailmaps not currently supported, consider using `an`/`ae` instead of `aN`/`aE`"
AUTHOR_DATE_REASON = "Formatted dates not supported, use `aI` and format the date yourself"
COMMITTER_DATE_REASON = "Formatted dates not supported, use `cI` and format the date yourself"
REF_NAMES_REASON = "Formatted ref names not supported, use `D` and format the names yourself"
BODY_REASON = "Body not supported, use `B` and extract the body yourself"
NOTES_REASON = "Notes not currently supported"
SIGNATURE_REASON = "Signatures not currently supported"
UNKNOWN_REASON = "Not found"

UNSUPPORTED_REASONS = {
    "aN": MAILMAP_REASON,
    "aE": MAILMAP_REASON,
    "ad": AUTHOR_DATE_REASON,
    "aD": AUTHOR_DATE_REASON,
    "ar": AUTHOR_DATE_REASON,
    "ai": AUTHOR_DATE_REASON,
    "cd": COMMITTER_DATE_REASON,
    "cD": COMMITTER_DATE_REASON,
    "cr": COMMITTER_DATE_REASON,
    "ci": COMMITTER_DATE_REASON,
    "d": REF_NAMES_REASON,
    "b": BODY_REASON,
    "N": NOTES_REASON,
    "GG": SIGNATURE_REASON,
    "G?": SIGNATURE_REASON,
    "GS": SIGNATURE_REASON,
    "GK": SIGNATURE_REASON,
}

Field = Union[FieldKind, UnsupportedField]

def classify(code: str) -> Field:
    """Map a single field code to its FieldKind, or to an UnsupportedField with the reason."""
    try:
        return FieldKind(code)
    except ValueError:
        return UnsupportedField(code=code, reason=UNSUPPORTED_REASONS.get(code, UNKNOWN_REASON))

def parse_fields(fields_input: str) -> List[FieldKind]:
    """
    Parse a comma-separated field list such as `H,an,at`.

    Every code is checked before any commit is walked; the first unsupported
    one raises UnsupportedFieldError. Order and duplicates are kept.
    """
    fields = []
    for code in fields_input.split(","):
        field = classify(code)
        if isinstance(field, UnsupportedField):
            logger.error(f"Rejected field code `{code}`: {field.reason}")
            field.reject()
        fields.append(field)
    return fields
