#!/usr/bin/env python3
"""Commit-Msg Guardian Hook.

Client-side `commit-msg` hook. Git passes the path of the file holding the
proposed message; its subject line must carry a ticket reference.

Install as .git/hooks/commit-msg.
"""

import sys
from pathlib import Path

# Add hooks directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

try:
    from _guardian_utils import log_guardian
    from _hook_service import run_hook_cli
except ImportError as e:
    print(f"[guardian] Guardian system unavailable: {e}", file=sys.stderr)
    sys.exit(1)


def main() -> int:
    """Main hook entry point."""
    return run_hook_cli("commit-msg", sys.argv[1:])


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log_guardian("ERROR", f"Commit-msg guardian error: {type(e).__name__}: {e}")
        print(f"[guardian] Guardian system error: {e}", file=sys.stderr)
        sys.exit(1)
