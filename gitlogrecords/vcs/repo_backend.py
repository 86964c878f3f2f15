import re
import logging
from git import Repo, GitCommandError
from git.exc import InvalidGitRepositoryError, NoSuchPathError
from typing import Dict, Iterator, List, Optional, Tuple
from gitlogrecords.vcs.models import CommitRecord, DiffStats, GitTime
from gitlogrecords.utils.errors import DataError, RangeError, RepositoryError

logger = logging.getLogger(__name__)

IDENTITY_PATTERN = re.compile(
    rb"^(?P<name>.*?) ?<(?P<email>[^<>]*)> (?P<seconds>-?\d+) (?P<offset>[+-]\d{4})$"
)

# Prefixes git drops when it shows a ref by its short name.
SHORTHAND_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/", "refs/")

def ref_shorthand(path: str) -> Optional[str]:
    """Return the short name git shows for a full ref path, or None if there is none."""
    for prefix in SHORTHAND_PREFIXES:
        if path.startswith(prefix):
            return path[len(prefix):] or None
    return None

def parse_identity(line: bytes) -> Tuple[bytes, bytes, GitTime]:
    """Split an `author`/`committer` header value into name, email and time."""
    match = IDENTITY_PATTERN.match(line)
    if not match:
        raise DataError(f"Malformed identity line: {line!r}")
    offset = match.group("offset")
    sign = -1 if offset.startswith(b"-") else 1
    minutes = sign * (int(offset[1:3]) * 60 + int(offset[3:5]))
    when = GitTime(seconds=int(match.group("seconds")), offset_minutes=minutes)
    return match.group("name"), match.group("email"), when

def parse_commit_object(hexsha: str, data: bytes) -> CommitRecord:
    """
    Build a CommitRecord from the raw bytes of a commit object.

    :param hexsha: The full id of the commit.
    :param data: The object body as stored by git (headers, blank line, message).
    :return: The parsed CommitRecord.
    """
    header, _, message = data.partition(b"\n\n")
    fields: Dict[bytes, bytes] = {}
    parents: List[str] = []
    for line in header.split(b"\n"):
        if line.startswith(b" "):
            # Continuation of a multi-line header such as gpgsig.
            continue
        key, _, value = line.partition(b" ")
        if key == b"parent":
            parents.append(value.decode("ascii"))
        elif key not in fields:
            fields[key] = value

    missing = [key.decode() for key in (b"tree", b"author", b"committer") if key not in fields]
    if missing:
        raise DataError(f"Commit {hexsha} is missing headers: {', '.join(missing)}")

    author_name, author_email, author_time = parse_identity(fields[b"author"])
    _, _, committer_time = parse_identity(fields[b"committer"])
    return CommitRecord(
        hexsha=hexsha,
        tree_hexsha=fields[b"tree"].decode("ascii"),
        parent_hexshas=parents,
        author_name=author_name,
        author_email=author_email,
        author_time=author_time,
        committer_time=committer_time,
        message=message.lstrip(b"\n"),
    )

def git_error_detail(error: GitCommandError) -> str:
    """The stderr text of a failed git command, without GitPython's `stderr: '...'` wrapping."""
    detail = (error.stderr or "").strip()
    if detail.startswith("stderr:"):
        detail = detail[len("stderr:"):].strip().strip("'")
    return detail.strip()

def parse_numstat(text: str) -> DiffStats:
    """Sum `git diff-tree --numstat` output. Binary files show `-` and count as zero lines."""
    files_changed = insertions = deletions = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        added, removed, _ = line.split("\t", 2)
        files_changed += 1
        insertions += int(added) if added != "-" else 0
        deletions += int(removed) if removed != "-" else 0
    return DiffStats(files_changed=files_changed, insertions=insertions, deletions=deletions)

class GitBackend:
    """Read-only access to one git repository for a single reporting run."""

    def __init__(self, repo: Repo):
        self.repo = repo
        self._short_ids: Dict[str, str] = {}

    @classmethod
    def open(cls, path: str) -> "GitBackend":
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.error(f"There is no Git repository at {path}")
            raise RepositoryError(f"There is no Git repository at {path}") from e
        logger.info(f"Opened repository at {repo.git_dir}")
        return cls(repo)

    def close(self):
        self.repo.close()

    def enumerate_refs(self) -> Iterator[Tuple[str, str]]:
        """Yield (short_name, commit_id) for every ref that peels to a commit."""
        try:
            refs = list(self.repo.refs)
        except (OSError, GitCommandError) as e:
            logger.error(f"Failed to enumerate references: {e}")
            raise RepositoryError(f"Failed to enumerate references: {e}") from e

        for ref in refs:
            short_name = ref_shorthand(ref.path)
            if not short_name:
                logger.debug(f"Skipping reference without a short name: {ref.path}")
                continue
            try:
                commit = ref.commit
            except ValueError:
                logger.debug(f"Skipping reference {ref.path}: it does not point at a commit")
                continue
            yield short_name, commit.hexsha

    def resolve_range(self, range_expr: str, oldest_first: bool = False) -> Iterator[str]:
        """
        Validate a revision range and return a lazy iterator over its commit ids.

        Commits come in git's default rev-list order (newest first), or strictly
        reversed when `oldest_first` is set.
        """
        try:
            self.repo.git.rev_parse(range_expr)
        except GitCommandError as e:
            detail = git_error_detail(e)
            logger.error(f"Invalid revision range {range_expr}: {detail}")
            raise RangeError(range_expr, detail) from e

        return (commit.hexsha for commit in self.repo.iter_commits(range_expr, reverse=oldest_first))

    def fetch_commit(self, commit_id: str) -> CommitRecord:
        stream = self.repo.odb.stream(bytes.fromhex(commit_id))
        data = stream.read()
        type_name = stream.type.decode() if isinstance(stream.type, bytes) else stream.type
        if type_name != "commit":
            raise DataError(f"Object {commit_id} is a {type_name}, not a commit")
        return parse_commit_object(commit_id, data)

    def diff_stats(self, tree_a: Optional[str], tree_b: str) -> Optional[DiffStats]:
        """Diff statistics from tree_a to tree_b; None when there is no tree_a or git cannot diff."""
        if tree_a is None:
            return None
        try:
            text = self.repo.git.diff_tree(tree_a, tree_b, r=True, numstat=True, no_renames=True)
        except GitCommandError as e:
            logger.warning(f"Could not diff {tree_a}..{tree_b}: {e}")
            return None
        return parse_numstat(text)

    def abbreviate(self, object_id: str) -> str:
        """Shortest unambiguous prefix of an object id."""
        if object_id not in self._short_ids:
            try:
                short_id = self.repo.git.rev_parse(object_id, short=True).strip()
            except GitCommandError as e:
                raise DataError(f"git returned a bad short hash for {object_id}") from e
            if not short_id or not object_id.startswith(short_id):
                raise DataError(f"git returned a bad short hash for {object_id}")
            self._short_ids[object_id] = short_id
        return self._short_ids[object_id]
