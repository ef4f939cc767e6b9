#!/usr/bin/env python3
"""Branch-name and commit-message grammars.

Both grammars are fixed, compiled once at import time and matched against
the whole string. ASCII semantics are used for \\w, \\d and \\s: the grammars
describe ticket keys and version numbers, not prose.

Usage:
    from _guardian_patterns import validate_branch_name, validate_commit_message
"""

import re

# ============================================================
# Grammars
# ============================================================

COMMIT_MESSAGE_PATTERN = re.compile(
    r"""
    Merge\ branch.*                     # generated by git merge
    |
    \[(?:AR\s?\d{6}|\w+-\d+)\]          # [AR123456], [AR 123456] or [JIRA-123]
    \s[\w\s]{0,25}                      # subject, 25 characters at most
    (?:\s-\s.+)?                        # optional " - description"
    """,
    re.VERBOSE | re.ASCII,
)
"""Accepted commit subjects, e.g. ``[JIRA-123] Subject - Description``."""

BRANCH_NAME_PATTERN = re.compile(
    r"""
    (?:refs/heads/)?
    (?:
        master
        |
        develop
        |
        (?:release|hotfix)/
        \d+\.\d+\.\d+
        -(?!SNAPSHOT)[\w-]*
        |
        (?:feature|bugfix|attic|support)/
        (?:AR\d{6}|\w+-?\d+)
        (?:-\d+\.\d+\.\d+(?!-SNAPSHOT))?
        -[\w-]+
    )
    """,
    re.VERBOSE | re.ASCII,
)
"""Accepted branch names (listed in INVALID_BRANCH_NAME_MSG)."""

SNAPSHOT_SUFFIX = "-SNAPSHOT"

REF_HEADS_PREFIX = "refs/heads/"


# ============================================================
# Validators
# ============================================================


def validate_commit_message(subject: str | None) -> bool:
    """Return True if subject matches COMMIT_MESSAGE_PATTERN. None is invalid."""
    if subject is None:
        return False
    return COMMIT_MESSAGE_PATTERN.fullmatch(subject) is not None


def validate_branch_name(branch: str | None) -> bool:
    """Return True if branch matches BRANCH_NAME_PATTERN.

    Names ending in -SNAPSHOT are rejected even when the grammar matches.
    """
    if branch is None:
        return False
    if BRANCH_NAME_PATTERN.fullmatch(branch) is None:
        return False
    return not branch.endswith(SNAPSHOT_SUFFIX)


def strip_ref_prefix(ref: str) -> str:
    """Remove a leading refs/heads/ from a ref name."""
    if ref.startswith(REF_HEADS_PREFIX):
        return ref[len(REF_HEADS_PREFIX):]
    return ref


def read_commit_subject(text: str | None) -> str | None:
    """Extract the subject line from a commit message file body.

    Comment lines (starting with #) are skipped, as git does. The first
    non-blank line, stripped, is the subject.

    Returns:
        The subject, or None if the message has no content.
    """
    if text is None:
        return None
    for line in text.splitlines():
        if line.startswith("#"):
            continue
        if line.strip():
            return line.strip()
    return None
