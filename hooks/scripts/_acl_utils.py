#!/usr/bin/env python3
"""Branch/user/path access control lists.

An ACL file holds one rule per line:

    branch-pattern,user-pattern,path-pattern

User and path default to ".*" when omitted. Each pattern is a raw regex
fragment matched against the whole string. Rules are permits: the first
rule whose branch and user patterns match is the applied entry, and every
file of the commit is judged against that entry's path pattern only. If no
rule applies the action is denied. A superuser rule for "git" and "root" is
always appended after the file's rules.

Blank lines and lines starting with # are ignored. Anything else that
cannot become a rule raises MalformedPolicyLine.

Patterns come from a file anyone with push access to the guardian
directory can edit, so they are matched with the `regex` package and a
per-match timeout. A timed-out match counts as no match.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import regex

from _guardian_utils import (
    REGEX_TIMEOUT_SECONDS,
    AdapterFailure,
    MalformedPolicyLine,
    log_guardian,
)

MATCH_ANYTHING = ".*"

SUPERUSERS = ("git", "root")
"""Identities granted unrestricted access on every branch."""

_FIELD_SEPARATOR = ","
_MAX_FIELDS = 3


# ============================================================
# Model
# ============================================================


def compile_anchored(fragment: str) -> "regex.Pattern":
    """Compile a raw pattern fragment for whole-string matching."""
    return regex.compile(f"(?:{fragment})")


@dataclass(frozen=True)
class AclEntry:
    branch_pattern: "regex.Pattern"
    user_pattern: "regex.Pattern"
    path_pattern: "regex.Pattern"
    allow: bool = True
    line_number: int | None = field(default=None, compare=False)

    @classmethod
    def from_fields(
        cls,
        branch: str,
        users: str | None = None,
        path: str | None = None,
        line_number: int | None = None,
    ) -> "AclEntry":
        """Build an entry from raw fragments; empty or None user/path match anything."""
        return cls(
            branch_pattern=compile_anchored(branch),
            user_pattern=compile_anchored(users or MATCH_ANYTHING),
            path_pattern=compile_anchored(path or MATCH_ANYTHING),
            line_number=line_number,
        )

    def describe(self) -> str:
        """One-line summary of the entry for debug logging."""
        return (
            f"Acl[allow={self.allow},"
            f"branch_patt='{self.branch_pattern.pattern}',"
            f"user_patt='{self.user_pattern.pattern}',"
            f"path_patt='{self.path_pattern.pattern}']"
        )


def superuser_entry() -> AclEntry:
    return AclEntry.from_fields(MATCH_ANYTHING, "|".join(SUPERUSERS))


# ============================================================
# Parsing
# ============================================================


def is_ignored_line(line: str | None) -> bool:
    """Blank lines and # comments produce no entry."""
    return line is None or line.startswith("#") or line.strip() == ""


def parse_acl_line(line: str, line_number: int, source: str | Path = "<acl>") -> AclEntry:
    """Parse one non-ignored ACL line.

    Raises:
        MalformedPolicyLine: Too many fields, empty branch field or a
            pattern that does not compile.
    """
    fields = [f.strip() for f in line.strip().split(_FIELD_SEPARATOR)]
    if len(fields) > _MAX_FIELDS:
        raise MalformedPolicyLine(
            source,
            line_number,
            f"expected at most {_MAX_FIELDS} comma-separated fields, got {len(fields)}",
        )
    if not fields[0]:
        raise MalformedPolicyLine(source, line_number, "branch pattern is empty")

    branch, users, path = (fields + [None] * _MAX_FIELDS)[:_MAX_FIELDS]
    try:
        return AclEntry.from_fields(branch, users, path, line_number=line_number)
    except regex.error as e:
        raise MalformedPolicyLine(source, line_number, f"invalid pattern: {e}") from e


def parse_acl_lines(lines: Iterable[str], source: str | Path = "<acl>") -> list[AclEntry]:
    """Parse ACL lines into an ordered entry list ending with the superuser entry."""
    acl = [
        parse_acl_line(line, number, source)
        for number, line in enumerate(lines, start=1)
        if not is_ignored_line(line)
    ]
    acl.append(superuser_entry())
    return acl


def load_acl_file(acl_file: str | Path) -> list[AclEntry]:
    """Read and parse an ACL file. Re-read on every call; nothing is cached.

    Raises:
        AdapterFailure: The file cannot be read.
        MalformedPolicyLine: A line cannot be parsed.
    """
    acl_path = Path(acl_file)
    try:
        text = acl_path.read_text(encoding="utf-8")
    except OSError as e:
        raise AdapterFailure(f"cannot read ACL file {acl_path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise AdapterFailure(f"cannot read ACL file {acl_path}: not valid UTF-8 ({e.reason})") from e

    acl = parse_acl_lines(text.splitlines(), source=acl_path)
    log_guardian("DEBUG", f"loaded {len(acl)} ACL entries from {acl_path}")
    return acl


# ============================================================
# Evaluation
# ============================================================


def matches(subject: str | None, pattern: "regex.Pattern | None") -> bool:
    """Whole-string match with timeout.

    Two Nones match; a None subject never matches a pattern. A timeout is
    treated as no match.
    """
    if subject is None and pattern is None:
        return True
    if subject is None or pattern is None:
        return False
    try:
        return pattern.fullmatch(subject, timeout=REGEX_TIMEOUT_SECONDS) is not None
    except TimeoutError:
        log_guardian(
            "WARN",
            f"ACL pattern timed out ({REGEX_TIMEOUT_SECONDS}s): {pattern.pattern[:50]}",
        )
        return False


def find_applied_entry(
    acl: Sequence[AclEntry], branch: str | None, user: str | None
) -> AclEntry | None:
    """Return the first allow entry whose branch and user patterns match."""
    for entry in acl:
        if (
            entry.allow
            and matches(branch, entry.branch_pattern)
            and matches(user, entry.user_pattern)
        ):
            return entry
    return None


def is_allowed(acl: Sequence[AclEntry], branch: str | None, user: str | None, files=None) -> bool:
    """Decide whether user may change files on branch.

    When files (a sequence of FileEntry) is given, every file's writeable
    flag is set against the applied entry's path pattern, and any
    non-writeable file denies the whole action. Later entries are never
    consulted once an entry applies. Without an applied entry the result is
    False and no file is touched.
    """
    applied = find_applied_entry(acl, branch, user)
    if applied is None:
        log_guardian("DEBUG", f"denied: {user}@{branch} (no matching ACL entry)")
        return False

    log_guardian("DEBUG", f"applied entry: {applied.describe()}")
    allowed = True
    for f in files or ():
        if matches(f.path, applied.path_pattern):
            f.writeable = True
        else:
            f.writeable = False
            allowed = False
            log_guardian("DEBUG", f"denied: {user}@{branch}:{f.path}")

    log_guardian("DEBUG", f"{'allowed' if allowed else 'denied'}: {user}@{branch}")
    return allowed
