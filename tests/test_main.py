import io
import json
import tempfile
import unittest
from unittest import mock
from contextlib import redirect_stderr, redirect_stdout
from gitlogrecords.config import RunOptions
from gitlogrecords.main import main, print_commits
from gitlogrecords.vcs.repo_backend import GitBackend
from gitlogrecords.utils.enums import OutputFormat
from gitlogrecords.utils.errors import ConfigurationError
from git_fixtures import build_linear_history

class TestMain(unittest.TestCase):

    def setUp(self):
        self.builder, (self.a, self.b, self.c) = build_linear_history()
        self.range_expr = f"{self.a.hexsha}..{self.c.hexsha}"

    def tearDown(self):
        self.builder.cleanup()

    def run_main(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_json_output(self):
        code, out, _ = self.run_main(self.range_expr, "H,h,an,at,aI,D,s,df,di,dd", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        rows = [json.loads(line) for line in out.splitlines()]
        self.assertEqual([row["H"] for row in rows], [self.c.hexsha, self.b.hexsha])
        for row in rows:
            self.assertEqual(list(row), ["H", "h", "an", "at", "aI", "D", "s", "df", "di", "dd"])
            self.assertTrue(row["H"].startswith(row["h"]))
        self.assertEqual(rows[0]["D"], [self.builder.repo.head.reference.name])
        self.assertEqual(rows[1]["D"], ["feature", "v1"])
        self.assertEqual(rows[1]["aI"], "2023-11-14T16:45:00-05:30")
        self.assertEqual(rows[1]["s"], "Add b")
        self.assertEqual((rows[0]["df"], rows[0]["di"], rows[0]["dd"]), ("", "", ""))
        self.assertEqual((rows[1]["df"], rows[1]["di"], rows[1]["dd"]), ("1", "3", "0"))

    def test_refs_reported_once(self):
        code, out, _ = self.run_main("HEAD", "D", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        refs = [json.loads(line)["D"] for line in out.splitlines()]
        self.assertEqual(refs[1], ["feature", "v1"])
        self.assertEqual(refs[2], [])
        self.assertEqual(sum(1 for names in refs if "v1" in names), 1)

    def test_csv_output(self):
        code, out, _ = self.run_main(self.range_expr, "an,at,P", "-o", "CSV", "--oldest-first", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), [
            "an,at,P",
            f'Alice,1700000100,["{self.a.hexsha}"]',
            f'Alice,1700000200,["{self.b.hexsha}"]',
        ])

    def test_first_row_has_empty_diff_fields_in_any_position(self):
        code, out, _ = self.run_main(self.range_expr, "dd,H,df", "-o", "csv", "--oldest-first", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[1], f",{self.b.hexsha},")
        self.assertEqual(lines[2], f"3,{self.c.hexsha},1")

    def test_unsupported_field_fails_before_output(self):
        code, out, err = self.run_main(self.range_expr, "H,aD", "--repo", self.builder.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("`aD`", err)
        self.assertIn("`aI`", err)

    def test_unknown_output_format(self):
        code, out, err = self.run_main(self.range_expr, "H", "-o", "xml", "--repo", self.builder.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Only JSON and CSV outputs are supported.", err)

    def test_malformed_range(self):
        code, out, err = self.run_main("missing..HEAD", "H", "--repo", self.builder.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("missing..HEAD", err)

    def test_not_a_repository(self):
        with tempfile.TemporaryDirectory() as path:
            code, out, err = self.run_main("HEAD", "H", "--repo", path)
        self.assertEqual(code, 1)
        self.assertIn("There is no Git repository", err)

    def test_no_diff_without_diff_fields(self):
        with mock.patch.object(GitBackend, "diff_stats") as diff_stats:
            code, out, _ = self.run_main("HEAD", "H,s", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        self.assertEqual(len(out.splitlines()), 3)
        diff_stats.assert_not_called()

    def test_diff_runs_when_a_diff_field_is_requested(self):
        with mock.patch.object(GitBackend, "diff_stats", return_value=None) as diff_stats:
            code, _, _ = self.run_main("HEAD", "H,di", "--repo", self.builder.path)
        self.assertEqual(code, 0)
        self.assertEqual(diff_stats.call_count, 3)

    def test_print_commits_to_stream(self):
        stream = io.StringIO()
        options = RunOptions(range_expr=self.range_expr, fields_input="H,H", repo=self.builder.path)
        self.assertEqual(print_commits(options, stream), 2)
        self.assertEqual(stream.getvalue().splitlines()[0], f'{{"H":"{self.c.hexsha}","H":"{self.c.hexsha}"}}')

class TestRunOptions(unittest.TestCase):

    def test_defaults(self):
        options = RunOptions(range_expr="HEAD", fields_input="H")
        self.assertEqual(options.repo, ".")
        self.assertEqual(options.output_format, OutputFormat.json)
        self.assertFalse(options.oldest_first)

    def test_output_format_is_case_insensitive(self):
        options = RunOptions(range_expr="HEAD", fields_input="H", output_format="Csv")
        self.assertEqual(options.output_format, OutputFormat.csv)

    def test_bad_output_format(self):
        with self.assertRaises(ConfigurationError):
            RunOptions(range_expr="HEAD", fields_input="H", output_format="yaml")

if __name__ == '__main__':
    unittest.main()
