#!/usr/bin/env python3
"""Commit descriptors and their abort-report formatting.

A CommitDescriptor describes either a commit that already exists (update
hook) or the change set staged for the next commit (pre-commit and
commit-msg hooks, no id). Each descriptor owns its file list; the ACL
engine records per-file decisions on it through FileEntry.writeable.
"""

from dataclasses import dataclass, field

from _guardian_utils import SUBJECT_DISPLAY_WIDTH, truncate_display

LABEL_WIDTH = 10
"""Labels are right-aligned to this width, e.g. '   Commit:'."""

_LABEL_GAP = "   "


@dataclass
class FileEntry:
    path: str
    writeable: bool = True

    def __post_init__(self):
        self.path = self.path.strip()


@dataclass
class CommitDescriptor:
    branch: str
    user: str
    id: str | None = None
    subject: str | None = None
    files: list[FileEntry] = field(default_factory=list)

    def denied_files(self) -> list[FileEntry]:
        return [f for f in self.files if not f.writeable]


def _line(label: str, value) -> str:
    return f"{label + ':':>{LABEL_WIDTH}}{_LABEL_GAP}{value}\n"


def format_commit_info(
    ci: CommitDescriptor,
    print_all_files: bool = False,
    width: int = SUBJECT_DISPLAY_WIDTH,
) -> str:
    """Format one commit for an abort report.

    The file list is printed when print_all_files is set or when any file
    was denied; in the latter case only denied files are listed. Subjects
    and paths are hard-cut to width characters.
    """
    msg = ""
    if ci.id is not None:
        msg += _line("Commit", ci.id)
    msg += _line("Branch", ci.branch)
    msg += _line("Author", ci.user)
    if ci.subject is not None:
        msg += _line("Subject", truncate_display(ci.subject, width))

    listed = ci.files if print_all_files else ci.denied_files()
    if not print_all_files and not listed:
        return msg + "\n"

    for index, f in enumerate(listed):
        path = truncate_display(f.path, width)
        if index == 0:
            msg += _line("Files", path)
        else:
            msg += " " * (LABEL_WIDTH + len(_LABEL_GAP)) + f"{path}\n"
    return msg
