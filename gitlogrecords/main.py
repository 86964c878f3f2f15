import sys
import logging
import argparse
from dotenv import load_dotenv
from git import GitCommandError
from pydantic import ValidationError
from typing import List, Optional, TextIO
from gitlogrecords.config import RunOptions, configure_logging, default_repo_path
from gitlogrecords.fields.field_codes import FieldKind, parse_fields
from gitlogrecords.fields.resolver import resolve_record
from gitlogrecords.output.row_emitter import RowEmitter
from gitlogrecords.utils.errors import ConfigurationError, RecordsError
from gitlogrecords.vcs.commit_walker import CommitWalker
from gitlogrecords.vcs.ref_index import build_reference_index
from gitlogrecords.vcs.repo_backend import GitBackend

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-log-records",
        description="Print a range of git commits as JSON lines or CSV, one record per commit.",
    )
    parser.add_argument('range', type=str, help="Commit range, e.g. v1.0..HEAD")
    parser.add_argument('fields', type=str, help="Comma-separated field codes, e.g. H,an,at,s")
    parser.add_argument('--repo', type=str, default=None, help="Path to the repository (default: current directory)")
    parser.add_argument('-o', '--outputformat', type=str, default="json", help="Output format: json or csv (default: json)")
    parser.add_argument('--oldest-first', action='store_true', help="Walk from the oldest commit to the newest")
    return parser

def print_commits(options: RunOptions, stream: Optional[TextIO] = None) -> int:
    """
    Walk the range in `options` and write one record per commit.

    :param options: Validated run options.
    :param stream: Where records go; standard output when None.
    :return: The number of records written.
    """
    fields = parse_fields(options.fields_input)
    backend = GitBackend.open(options.repo)

    try:
        ref_index = None
        if FieldKind.ref_names in fields:
            ref_index = build_reference_index(backend)

        compute_diffs = any(field.needs_diff for field in fields)
        walker = CommitWalker(backend, options.range_expr, options.oldest_first, compute_diffs)
        emitter = RowEmitter(options.output_format, stream)
        records = (
            resolve_record(fields, step.commit, step.diff_stats, ref_index, backend)
            for step in walker
        )
        return emitter.emit_all(records)
    finally:
        backend.close()

def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        try:
            options = RunOptions(
                range_expr=args.range,
                fields_input=args.fields,
                repo=args.repo if args.repo is not None else default_repo_path(),
                output_format=args.outputformat,
                oldest_first=args.oldest_first,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid options: {e}")
        print_commits(options)
    except RecordsError as e:
        logger.debug(f"Aborting: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except GitCommandError as e:
        logger.error(f"git failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
