#!/usr/bin/env python3
"""Pre-Commit Guardian Hook.

Client-side `pre-commit` hook. Rejects the commit when:
1. The current branch name does not follow the branch model
2. The staged files include any the committer may not write on this branch

Install as .git/hooks/pre-commit.
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
    return run_hook_cli("pre-commit", sys.argv[1:])


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log_guardian("ERROR", f"Pre-commit guardian error: {type(e).__name__}: {e}")
        print(f"[guardian] Guardian system error: {e}", file=sys.stderr)
        sys.exit(1)
