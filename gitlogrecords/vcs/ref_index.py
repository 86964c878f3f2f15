import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

class ReferenceIndex:
    """
    Map of commit id to the short names of the refs pointing at it.

    Entries are drained on read: the refs of a commit are handed out once,
    the first time that commit asks for them.
    """

    def __init__(self, entries: Optional[Dict[str, List[str]]] = None):
        self.entries = entries if entries is not None else {}

    def add(self, commit_id: str, short_name: str):
        self.entries.setdefault(commit_id, []).append(short_name)

    def take(self, commit_id: str) -> List[str]:
        return self.entries.pop(commit_id, [])

    def __len__(self):
        return len(self.entries)

    def __contains__(self, commit_id):
        return commit_id in self.entries

def build_reference_index(backend) -> ReferenceIndex:
    """
    Build the index from the backend's ref enumeration.

    :param backend: A GitBackend (or anything with `enumerate_refs()`).
    :return: A ReferenceIndex keyed by commit id, names in enumeration order.
    """
    index = ReferenceIndex()
    ref_count = 0
    for short_name, commit_id in backend.enumerate_refs():
        index.add(commit_id, short_name)
        ref_count += 1
    logger.info(f"Indexed {ref_count} references across {len(index)} commits")
    return index
