#!/usr/bin/env python3
"""Update Guardian Hook.

Server-side `update` hook. Git passes the ref being updated and its old
and new revisions. Rejects the push when:
1. The branch name does not follow the branch model
2. Any pushed commit message lacks a ticket or is too long
3. Any pushed commit changes files its author may not write

Install as <repo>.git/hooks/update.
"""

import sys
from pathlib import Path

# Add hooks directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

try:
    from _guardian_utils import log_guardian
    from _hook_service import run_hook_cli
except ImportError as e:
    # Fail-close: guardian system unavailable = reject the push
    print(f"[guardian] Guardian system unavailable: {e}", file=sys.stderr)
    sys.exit(1)


def main() -> int:
    """Main hook entry point."""
    return run_hook_cli("update", sys.argv[1:])


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log_guardian("ERROR", f"Update guardian error: {type(e).__name__}: {e}")
        print(f"[guardian] Guardian system error: {e}", file=sys.stderr)
        sys.exit(1)
