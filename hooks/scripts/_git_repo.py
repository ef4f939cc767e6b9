#!/usr/bin/env python3
"""Repository adapter: reads branch, user, staged files and pushed commits.

Every git command runs with explicit --git-dir/--work-tree (when known)
and LC_ALL=C. A failing git command is fatal for the hook: it raises
AdapterFailure and no partial validation is attempted.
"""

import shutil
import subprocess
from pathlib import Path

from _commit_info import CommitDescriptor, FileEntry
from _guardian_utils import AdapterFailure, get_git_env, log_guardian, sanitize_stderr_for_log

NULL_REVISION = "0" * 40
"""What git passes to the update hook for a missing old or new revision."""

_RECORD_SEPARATOR = "\x1e"
_COMMIT_FORMAT = f"--format=format:{_RECORD_SEPARATOR}%h%n%an%n%s"
_PATH_TERMINATOR = "\0"
"""With -z, git prints paths verbatim and NUL-terminated instead of C-quoting them."""


def is_null_revision(revision: str | None) -> bool:
    return not revision or set(revision) == {"0"}


class GitRepo:
    """A git repository, bare or with a work tree."""

    def __init__(self, git_dir: str | Path | None = None, work_tree: str | Path | None = None):
        """
        Args:
            git_dir: The repository's git directory. Discovered with
                `git rev-parse --git-dir` when omitted.
            work_tree: The working tree. Inferred as the parent of a ".git"
                directory; hosted (bare) repositories have none.
        """
        self.git_dir: Path | None = None
        self.work_tree: Path | None = None

        if git_dir is None:
            git_dir = self._git("rev-parse", "--git-dir")
        git_dir = str(git_dir).strip()
        if not git_dir:
            raise AdapterFailure("error initializing GitRepo: no git directory")
        self.git_dir = Path(git_dir).resolve()

        if work_tree is None and self.git_dir.name == ".git":
            work_tree = self.git_dir.parent
        if work_tree is not None and str(work_tree).strip():
            self.work_tree = Path(str(work_tree).strip()).resolve()

        log_guardian("DEBUG", f"git_dir={self.git_dir} work_tree={self.work_tree}")

    @property
    def default_commit_msg_file(self) -> Path:
        return self.git_dir / "COMMIT_EDITMSG"

    # ========== Queries ==========

    def current_branch(self) -> str:
        """Current branch name; "HEAD" when detached."""
        result = self._run("symbolic-ref", "--quiet", "--short", "HEAD")
        if result.returncode != 0:
            return "HEAD"
        return result.stdout.strip()

    def current_user(self) -> str:
        user = self._git("config", "--get", "user.name")
        if not user:
            raise AdapterFailure("git user.name is not configured")
        return user

    def modified_files(self) -> list[FileEntry]:
        """Tracked files with changes staged for the next commit."""
        out = self._git("diff", "--cached", "--name-only", "-z")
        return [FileEntry(path) for path in out.split(_PATH_TERMINATOR) if path.strip()]

    def staged_commit(self, subject: str | None = None) -> CommitDescriptor:
        return CommitDescriptor(
            branch=self.current_branch(),
            user=self.current_user(),
            subject=subject,
            files=self.modified_files(),
        )

    def commit_range(
        self, branch: str, old_revision: str, new_revision: str
    ) -> list[CommitDescriptor]:
        """Describe each commit that old_revision..new_revision introduces.

        A null old revision (branch creation) lists the commits reachable
        from new_revision that no existing ref reaches. A null new revision
        (branch deletion) introduces no commits.
        """
        if is_null_revision(new_revision):
            return []
        if is_null_revision(old_revision):
            revisions = [new_revision, "--not", "--all"]
        else:
            revisions = [f"{old_revision}..{new_revision}"]

        out = self._git("log", _COMMIT_FORMAT, "--name-only", "-z", *revisions, "--")
        return parse_commit_log(out, branch)

    # ========== Plumbing ==========

    def _command(self, *args: str) -> list[str]:
        cmd = ["git"]
        if self.git_dir is not None:
            cmd.append(f"--git-dir={self.git_dir}")
        if self.work_tree is not None:
            cmd.append(f"--work-tree={self.work_tree}")
        cmd.extend(args)
        return cmd

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        if shutil.which("git") is None:
            raise AdapterFailure("git executable not found in PATH")
        cmd = self._command(*args)
        log_guardian("DEBUG", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                env=get_git_env(),
            )
        except OSError as e:
            raise AdapterFailure(f"cannot run git: {e}") from e

    def _git(self, *args: str) -> str:
        """Run git and return stripped stdout; any non-zero exit is fatal."""
        result = self._run(*args)
        if result.returncode != 0:
            stderr_msg = sanitize_stderr_for_log(result.stderr)
            raise AdapterFailure(
                f"git {args[0]} failed (rc={result.returncode}): {stderr_msg}"
            )
        return result.stdout.strip()


def parse_commit_log(out: str, branch: str) -> list[CommitDescriptor]:
    """Parse `git log -z --name-only` output produced with _COMMIT_FORMAT.

    Each record starts with _RECORD_SEPARATOR and holds the abbreviated
    hash, author and subject on their own lines, followed by the changed
    paths, each terminated by NUL. Paths may themselves contain newlines,
    so only the three header fields are split on line breaks.
    """
    commits = []
    for record in out.split(_RECORD_SEPARATOR):
        if not record.strip(_PATH_TERMINATOR + "\n "):
            continue
        header = record.split("\n", 2)
        header += [""] * (3 - len(header))
        commit_id, user, rest = header

        subject_end = min(
            (i for i in (rest.find("\n"), rest.find(_PATH_TERMINATOR)) if i >= 0),
            default=len(rest),
        )
        subject = rest[:subject_end]
        files = [
            FileEntry(path)
            for path in rest[subject_end + 1:].split(_PATH_TERMINATOR)
            if path.strip()
        ]
        commits.append(
            CommitDescriptor(
                id=commit_id.strip(),
                branch=branch,
                user=user.strip(),
                subject=subject.strip(),
                files=files,
            )
        )
    return commits
