#!/usr/bin/env python3
"""Guardian utilities for the git branch guardian hooks.

This module provides shared utilities for all guardian hooks:
- Error types (policy violations vs. adapter/configuration failures)
- Configuration loading from <guardian-dir>/config.json
- Dry-run mode support
- Logging with rotation
- Git subprocess environment

Config resolution:
    1. $GUARDIAN_DIR/config.json (explicit guardian directory)
    2. <git-dir>/guardian/config.json (per-repository default)
    3. Built-in defaults (_DEFAULT_CONFIG)

Usage:
    from _guardian_utils import (
        AdapterFailure,
        PolicyViolation,
        load_guardian_config,
        is_dry_run,
        log_guardian,
    )

Note on log_guardian():
    - Silent if no log file has been configured yet
    - Silent on file write errors
    - Logging must never be the reason a hook rejects a push
"""

import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

# ============================================================
# Constants
# ============================================================

GUARDIAN_DIR_ENV = "GUARDIAN_DIR"
"""Environment variable naming the guardian directory (ACL file, config, log)."""

DRY_RUN_ENV = "GUARDIAN_HOOK_DRY_RUN"
"""Environment variable to enable dry-run mode.
Set to "1", "true", or "yes" to enable."""

DEBUG_ENV = "GUARDIAN_DEBUG"
"""Environment variable to echo debug log lines to stderr."""

DEFAULT_GUARDIAN_SUBDIR = "guardian"
"""Guardian directory name inside the git directory when GUARDIAN_DIR is unset."""

MAX_LOG_SIZE_BYTES = 1_000_000
"""Maximum log file size before rotation (1 MB)."""

REGEX_TIMEOUT_SECONDS = 0.5
"""Timeout for matching one user-supplied ACL pattern."""

SUBJECT_DISPLAY_WIDTH = 50
"""Hard cut applied to subjects and paths in abort reports."""

_TRUTHY = ("1", "true", "yes")


# ============================================================
# Errors
# ============================================================


class GuardianError(Exception):
    """Base class for everything a guardian hook can abort with."""

    pass


class PolicyViolation(GuardianError):
    """A branch name, commit message or permission check failed.

    The message is the fully formatted, user-facing report.
    """

    def __init__(self, stage, message: str):
        super().__init__(message)
        self.stage = stage


class AdapterFailure(GuardianError):
    """Repository state or guardian configuration could not be read."""

    pass


class MalformedPolicyLine(AdapterFailure):
    """An ACL file line could not be turned into an entry."""

    def __init__(self, path, line_number: int, reason: str):
        super().__init__(f"{path}:{line_number}: {reason}")
        self.path = path
        self.line_number = line_number
        self.reason = reason


# ============================================================
# Configuration
# ============================================================

_DEFAULT_CONFIG = {
    "aclFile": "acl.ghl",
    "logFile": "guardian.log",
    "subjectWidth": SUBJECT_DISPLAY_WIDTH,
}

_log_file: Path | None = None
"""Log destination for log_guardian(). Set by configure_log_file()."""


def resolve_guardian_dir(git_dir: str | Path | None) -> Path:
    """Get the guardian directory.

    Args:
        git_dir: The repository's git directory, used when GUARDIAN_DIR is unset.

    Returns:
        Absolute guardian directory path.

    Raises:
        AdapterFailure: If neither GUARDIAN_DIR nor a git directory is available.
    """
    env_dir = os.environ.get(GUARDIAN_DIR_ENV, "")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    if git_dir is None:
        raise AdapterFailure(
            f"{GUARDIAN_DIR_ENV} is not set and no git directory is available"
        )
    return (Path(git_dir) / DEFAULT_GUARDIAN_SUBDIR).resolve()


def load_guardian_config(guardian_dir: Path) -> dict[str, Any]:
    """Load config.json from the guardian directory, merged over defaults.

    A missing config.json is normal. Invalid JSON or invalid values are
    logged and replaced by defaults; they never block a hook on their own.

    Args:
        guardian_dir: Directory that may contain config.json.

    Returns:
        Configuration dict with every known key present.
    """
    config_path = guardian_dir / "config.json"
    if not config_path.exists():
        return dict(_DEFAULT_CONFIG)

    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = json.load(f)
    except UnicodeDecodeError as e:
        log_guardian(
            "ERROR",
            f"[FALLBACK] {config_path} is not valid UTF-8 ({e.reason})\n"
            "  Using defaults. Save the file as UTF-8 to restore the guardian config.",
        )
        return dict(_DEFAULT_CONFIG)
    except json.JSONDecodeError as e:
        log_guardian(
            "ERROR",
            f"[FALLBACK] Invalid JSON in {config_path}: {e}\n"
            "  Using defaults. Fix JSON syntax to restore the guardian config.",
        )
        return dict(_DEFAULT_CONFIG)
    except OSError as e:
        log_guardian("ERROR", f"[FALLBACK] Failed to read {config_path}: {e}")
        return dict(_DEFAULT_CONFIG)

    if not isinstance(loaded, dict):
        log_guardian("ERROR", f"[FALLBACK] {config_path} must contain a JSON object")
        return dict(_DEFAULT_CONFIG)

    problems = _config_problems(loaded)
    for _key, err in problems:
        log_guardian("WARN", f"Config validation: {err}")

    rejected = {key for key, _err in problems}
    config = dict(_DEFAULT_CONFIG)
    for key, value in loaded.items():
        if key in _DEFAULT_CONFIG and key not in rejected:
            config[key] = value
    log_guardian("INFO", f"Loaded config from {config_path}")
    return config


def validate_guardian_config(config: dict) -> list[str]:
    """Validate guardian configuration.

    Args:
        config: Loaded configuration dictionary.

    Returns:
        List of validation error messages (empty if valid). Every message
        starts with the offending key.
    """
    return [err for _key, err in _config_problems(config)]


def _config_problems(config: dict) -> list[tuple[str, str]]:
    """(key, message) for every invalid or unknown setting in config."""
    problems = []

    for key in ("aclFile", "logFile"):
        if key in config:
            value = config[key]
            if not isinstance(value, str) or not value.strip():
                problems.append((key, f"{key} must be a non-empty string, got {value!r}"))

    if "subjectWidth" in config:
        width = config["subjectWidth"]
        if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
            problems.append(
                ("subjectWidth", f"subjectWidth must be a positive integer, got {width!r}")
            )

    for key in config:
        if key not in _DEFAULT_CONFIG:
            problems.append((key, f"{key} is not a recognised setting"))

    return problems


# ============================================================
# Dry-Run Mode
# ============================================================


def is_dry_run() -> bool:
    """Check if running in dry-run (simulation) mode.

    In dry-run mode, hooks log and print what they WOULD reject but
    let the git operation proceed.

    Returns:
        True if dry-run mode is enabled.
    """
    return os.environ.get(DRY_RUN_ENV, "").lower() in _TRUTHY


def is_debug() -> bool:
    return os.environ.get(DEBUG_ENV, "").lower() in _TRUTHY


# ============================================================
# Logging with Rotation
# ============================================================


def configure_log_file(log_file: str | Path | None) -> None:
    """Set (or clear, with None) the destination used by log_guardian()."""
    global _log_file
    _log_file = Path(log_file) if log_file is not None else None


def _rotate_log_if_needed(log_file: Path) -> None:
    """Rotate log file to .log.1 once it exceeds MAX_LOG_SIZE_BYTES.

    Silent on any error (non-critical operation).
    """
    try:
        if not log_file.exists():
            return
        if log_file.stat().st_size < MAX_LOG_SIZE_BYTES:
            return

        backup_file = log_file.with_suffix(".log.1")
        if backup_file.exists():
            backup_file.unlink()
        log_file.rename(backup_file)
    except OSError:
        pass


def log_guardian(level: str, message: str) -> None:
    """Log a guardian event.

    Log format:
        TIMESTAMP [LEVEL] [DRY-RUN] MESSAGE

    DEBUG lines are also echoed to stderr when GUARDIAN_DEBUG is set.

    Args:
        level: Log level (DEBUG, INFO, WARN, ERROR, BLOCK, ALLOW, DRY-RUN)
        message: Message to log.
    """
    if level == "DEBUG":
        if not is_debug():
            return
        print(f"[guardian debug] {message}", file=sys.stderr)

    if _log_file is None:
        return

    try:
        timestamp = datetime.now().isoformat(timespec="seconds")
        mode = "[DRY-RUN] " if is_dry_run() else ""
        line = f"{timestamp} [{level}] {mode}{message}\n"

        _log_file.parent.mkdir(parents=True, exist_ok=True)
        _rotate_log_if_needed(_log_file)

        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError:
        # Silent fail - don't break hook on log error
        pass


# ============================================================
# Display Helpers
# ============================================================


def truncate_display(text: str | None, width: int = SUBJECT_DISPLAY_WIDTH) -> str | None:
    """Hard-cut text to width characters (no ellipsis). None passes through."""
    if text is None or len(text) <= width:
        return text
    return text[:width]


# ============================================================
# Git Integration
# ============================================================


def get_git_env() -> dict:
    """Get environment for git subprocess with LC_ALL=C.

    Forces git to output messages in English (POSIX locale),
    ensuring consistent parsing regardless of system locale.

    Returns:
        Copy of current environment with LC_ALL=C set.
    """
    env = os.environ.copy()
    env["LC_ALL"] = "C"
    return env


def sanitize_stderr_for_log(stderr: str, max_length: int = 500) -> str:
    """Truncate git stderr for logs and diagnostics, masking the home directory."""
    if not stderr:
        return ""

    sanitized = stderr.strip()[:max_length]
    if len(stderr.strip()) > max_length:
        sanitized += "..."

    home = os.path.expanduser("~")
    if home != "~":
        sanitized = sanitized.replace(home, "~")

    return sanitized
