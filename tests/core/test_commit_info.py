"""Tests for commit descriptors and abort-report formatting in _commit_info.py."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
import _bootstrap  # noqa: F401, E402

from _commit_info import CommitDescriptor, FileEntry, format_commit_info  # noqa: E402


def _commit(**overrides):
    values = dict(
        id="abc1234",
        branch="develop",
        user="alice",
        subject="[JIRA-1] Fix it",
        files=[FileEntry("a.txt"), FileEntry("b.txt"), FileEntry("c.txt")],
    )
    values.update(overrides)
    return CommitDescriptor(**values)


class TestFileEntry:
    def test_path_is_trimmed(self):
        assert FileEntry("  src/app.py\r\n").path == "src/app.py"

    def test_writeable_by_default(self):
        assert FileEntry("a.txt").writeable


class TestFormatCommitInfo:
    def test_all_files_writeable(self):
        assert format_commit_info(_commit()) == (
            "   Commit:   abc1234\n"
            "   Branch:   develop\n"
            "   Author:   alice\n"
            "  Subject:   [JIRA-1] Fix it\n"
            "\n"
        )

    def test_only_denied_files_listed(self):
        ci = _commit()
        ci.files[0].writeable = False
        ci.files[2].writeable = False
        assert format_commit_info(ci) == (
            "   Commit:   abc1234\n"
            "   Branch:   develop\n"
            "   Author:   alice\n"
            "  Subject:   [JIRA-1] Fix it\n"
            "    Files:   a.txt\n"
            "             c.txt\n"
        )

    def test_print_all_files(self):
        ci = _commit()
        ci.files[1].writeable = False
        assert format_commit_info(ci, print_all_files=True) == (
            "   Commit:   abc1234\n"
            "   Branch:   develop\n"
            "   Author:   alice\n"
            "  Subject:   [JIRA-1] Fix it\n"
            "    Files:   a.txt\n"
            "             b.txt\n"
            "             c.txt\n"
        )

    def test_staged_commit_without_id_or_subject(self):
        ci = _commit(id=None, subject=None, files=[])
        assert format_commit_info(ci) == (
            "   Branch:   develop\n"
            "   Author:   alice\n"
            "\n"
        )

    def test_print_all_files_with_no_files(self):
        ci = _commit(files=[])
        assert format_commit_info(ci, print_all_files=True).endswith("  Subject:   [JIRA-1] Fix it\n")

    def test_subject_and_paths_hard_cut(self):
        long_subject = "[JIRA-1] " + "x" * 80
        long_path = "src/" + "deep/" * 20 + "file.py"
        ci = _commit(subject=long_subject, files=[FileEntry(long_path, writeable=False)])
        lines = format_commit_info(ci).splitlines()

        assert lines[3] == "  Subject:   " + long_subject[:50]
        assert lines[4] == "    Files:   " + long_path[:50]
        assert "..." not in lines[3]

    def test_custom_width(self):
        ci = _commit(subject="[JIRA-1] Fix it")
        assert "  Subject:   [JIRA-1]\n" in format_commit_info(ci, width=8)

    def test_descriptors_do_not_share_file_lists(self):
        first = CommitDescriptor(branch="develop", user="alice")
        second = CommitDescriptor(branch="develop", user="alice")
        first.files.append(FileEntry("a.txt"))
        assert second.files == []
