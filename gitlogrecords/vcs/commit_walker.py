import logging
from typing import Iterator, Optional
from gitlogrecords.vcs.models import CommitRecord, WalkStep

logger = logging.getLogger(__name__)

class CommitWalker:
    """
    Walk a revision range once, pairing each commit with the diff statistics
    against the commit visited just before it.

    The first commit has no predecessor, so its diff_stats is None. With
    compute_diffs off no diff is run and every diff_stats is None.
    """

    def __init__(self, backend, range_expr: str, oldest_first: bool = False, compute_diffs: bool = True):
        self.backend = backend
        self.range_expr = range_expr
        self.oldest_first = oldest_first
        self.compute_diffs = compute_diffs
        self.previous: Optional[CommitRecord] = None
        self._started = False

    def __iter__(self) -> Iterator[WalkStep]:
        if self._started:
            raise RuntimeError("A CommitWalker can only be iterated once")
        self._started = True
        return self._walk()

    def _walk(self) -> Iterator[WalkStep]:
        commit_ids = self.backend.resolve_range(self.range_expr, self.oldest_first)
        visited = 0
        for commit_id in commit_ids:
            commit = self.backend.fetch_commit(commit_id)
            diff_stats = None
            if self.compute_diffs:
                previous_tree = self.previous.tree_hexsha if self.previous else None
                diff_stats = self.backend.diff_stats(previous_tree, commit.tree_hexsha)
            self.previous = commit
            visited += 1
            logger.debug(f"Visited commit {commit_id}")
            yield WalkStep(commit=commit, diff_stats=diff_stats)
        logger.info(f"Walked {visited} commits in range {self.range_expr}")
