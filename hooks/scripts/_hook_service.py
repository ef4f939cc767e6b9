#!/usr/bin/env python3
"""Hook orchestration: which checks run for which git hook.

    update      branch name -> commit messages -> permissions   (server side)
    pre-commit  branch name -> permissions                      (client side)
    commit-msg  commit message                                  (client side)

Each check collects every offending commit before failing, then raises a
single PolicyViolation carrying the formatted report. The first failing
check ends the invocation; later checks never run.

Usage:
    from _hook_service import run_hook_cli
    sys.exit(run_hook_cli("update", sys.argv[1:]))
"""

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from _acl_utils import is_allowed, load_acl_file
from _commit_info import CommitDescriptor, format_commit_info
from _git_repo import GitRepo
from _guardian_messages import (
    COMMIT_MESSAGE_ABORTED_MSG,
    INSUFFICIENT_PERMISSIONS_MSG,
    INVALID_BRANCH_NAME_MSG,
)
from _guardian_patterns import (
    read_commit_subject,
    strip_ref_prefix,
    validate_branch_name,
    validate_commit_message,
)
from _guardian_utils import (
    SUBJECT_DISPLAY_WIDTH,
    AdapterFailure,
    PolicyViolation,
    configure_log_file,
    is_dry_run,
    load_guardian_config,
    log_guardian,
    resolve_guardian_dir,
)


class HookKind(Enum):
    UPDATE = "update"
    PRE_COMMIT = "pre-commit"
    COMMIT_MSG = "commit-msg"

    @classmethod
    def from_name(cls, name: str) -> "HookKind | None":
        try:
            return cls(name)
        except ValueError:
            return None


class HookStage(Enum):
    """Progress through one invocation.

    A PolicyViolation's stage is the one that could not be reached.
    """

    START = "start"
    BRANCH_NAME_CHECKED = "branch-name-checked"
    MESSAGE_CHECKED = "message-checked"
    PERMISSIONS_CHECKED = "permissions-checked"
    ALLOWED = "allowed"


@dataclass(frozen=True)
class HookConfig:
    guardian_dir: Path
    acl_file: Path
    repo: GitRepo
    subject_width: int = SUBJECT_DISPLAY_WIDTH

    @classmethod
    def load(cls, repo: GitRepo | None = None, guardian_dir: Path | None = None) -> "HookConfig":
        """Build the configuration for one invocation.

        Also points log_guardian() at the configured log file.
        """
        repo = repo or GitRepo()
        guardian_dir = guardian_dir or resolve_guardian_dir(repo.git_dir)
        configure_log_file(guardian_dir / "guardian.log")

        config = load_guardian_config(guardian_dir)
        configure_log_file(guardian_dir / config["logFile"])
        return cls(
            guardian_dir=guardian_dir,
            acl_file=guardian_dir / config["aclFile"],
            repo=repo,
            subject_width=config["subjectWidth"],
        )


# ============================================================
# Checks
# ============================================================


def check_branch_name(branch: str) -> None:
    if not validate_branch_name(branch):
        log_guardian("BLOCK", f"Invalid branch name: {branch}")
        raise PolicyViolation(
            HookStage.BRANCH_NAME_CHECKED, INVALID_BRANCH_NAME_MSG.format(branch=branch)
        )


def check_commit_messages(
    commits: CommitDescriptor | Sequence[CommitDescriptor], width: int = SUBJECT_DISPLAY_WIDTH
) -> None:
    if isinstance(commits, CommitDescriptor):
        commits = [commits]

    errors = []
    for ci in commits:
        log_guardian("DEBUG", f"ci.subject={ci.subject}")
        if not validate_commit_message(ci.subject):
            errors.append(format_commit_info(ci, print_all_files=True, width=width))

    if errors:
        log_guardian("BLOCK", f"{len(errors)} invalid commit message(s)")
        raise PolicyViolation(
            HookStage.MESSAGE_CHECKED,
            COMMIT_MESSAGE_ABORTED_MSG.format(details="\n".join(errors)),
        )


def check_branch_permissions(
    config: HookConfig, commits: CommitDescriptor | Sequence[CommitDescriptor]
) -> None:
    if isinstance(commits, CommitDescriptor):
        commits = [commits]

    acl = load_acl_file(config.acl_file)
    errors = []
    for ci in commits:
        if not is_allowed(acl, ci.branch, ci.user, ci.files):
            errors.append(format_commit_info(ci, width=config.subject_width))

    if errors:
        log_guardian("BLOCK", f"{len(errors)} commit(s) exceed granted permissions")
        raise PolicyViolation(
            HookStage.PERMISSIONS_CHECKED,
            INSUFFICIENT_PERMISSIONS_MSG.format(details="\n".join(errors)),
        )


def read_commit_message_file(commit_msg_file: str | Path | None) -> str | None:
    """Subject of the message in commit_msg_file, or None if the file is absent."""
    if commit_msg_file is None:
        return None
    path = Path(commit_msg_file).expanduser().resolve()
    log_guardian("DEBUG", f"commit_msg_file={path}")
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise AdapterFailure(f"cannot read commit message file {path}: {e.strerror or e}") from e
    return read_commit_subject(text)


# ============================================================
# Dispatch
# ============================================================


def run_hook(config: HookConfig, kind: HookKind, args: Sequence[str]) -> HookStage:
    """Run every check for one hook invocation.

    Returns:
        HookStage.ALLOWED when every applicable check passed.

    Raises:
        PolicyViolation: A check failed; later checks did not run.
        AdapterFailure: Repository state or the ACL file could not be read.
    """
    repo = config.repo

    if kind is HookKind.UPDATE:
        if len(args) < 3:
            raise AdapterFailure("update hook expects <ref> <old-revision> <new-revision>")
        branch = strip_ref_prefix(args[0])
        check_branch_name(branch)
        commits = repo.commit_range(branch, args[1], args[2])
        check_commit_messages(commits, width=config.subject_width)
        check_branch_permissions(config, commits)

    elif kind is HookKind.PRE_COMMIT:
        check_branch_name(repo.current_branch())
        check_branch_permissions(config, repo.staged_commit())

    elif kind is HookKind.COMMIT_MSG:
        commit_msg_file = args[0] if args else repo.default_commit_msg_file
        subject = read_commit_message_file(commit_msg_file)
        check_commit_messages(repo.staged_commit(subject), width=config.subject_width)

    return HookStage.ALLOWED


def run_hook_cli(hook_name: str, args: Sequence[str], config: HookConfig | None = None) -> int:
    """Run a hook and translate the outcome into a git hook exit status.

    Returns:
        0 to let git proceed, 1 to reject. Reports go to stderr.
    """
    kind = HookKind.from_name(hook_name)
    if kind is None:
        log_guardian("INFO", f"Hook not handled by guardian: {hook_name}")
        return 0

    try:
        config = config or HookConfig.load()
        log_guardian("INFO", f"{kind.value} hook: {' '.join(args)}")
        run_hook(config, kind, args)
    except PolicyViolation as e:
        if is_dry_run():
            log_guardian("DRY-RUN", f"Would reject {kind.value} ({e.stage.value} not reached)")
            print(f"[guardian dry-run] the following would be rejected:\n\n{e}", file=sys.stderr)
            return 0
        print(e, file=sys.stderr)
        return 1
    except AdapterFailure as e:
        log_guardian("ERROR", f"{kind.value} hook aborted: {e}")
        print(f"[guardian] {kind.value} hook aborted: {e}", file=sys.stderr)
        return 1

    log_guardian("ALLOW", f"{kind.value} hook passed")
    return 0
