#!/usr/bin/env python3
"""Git Guardian Hook (generic entry point).

Runs the guardian checks for one git hook invocation:

    git_guardian.py update <ref> <old-revision> <new-revision>
    git_guardian.py pre-commit
    git_guardian.py commit-msg <message-file>

When installed as a symlink named after the hook (for example
.git/hooks/pre-commit -> git_guardian.py) the hook name is taken from the
program name and every argument is passed through.

Exit status 0 lets git proceed; 1 rejects the operation.

Design Principles:
- Fail-Close: If the guardian system fails, reject the operation
- Thin wrapper: All logic in _hook_service.run_hook_cli()
"""

import sys
from pathlib import Path

# Add hooks directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

try:
    from _guardian_utils import log_guardian
    from _hook_service import HookKind, run_hook_cli
except ImportError as e:
    # Fail-close: guardian system unavailable = reject
    print(f"[guardian] Guardian system unavailable: {e}", file=sys.stderr)
    sys.exit(1)

USAGE = "usage: git_guardian.py <update|pre-commit|commit-msg> [hook arguments...]"


def main(argv: list[str] | None = None) -> int:
    """Main hook entry point."""
    argv = sys.argv if argv is None else argv
    program = Path(argv[0]).name if argv else ""

    if HookKind.from_name(program) is not None:
        return run_hook_cli(program, argv[1:])
    if len(argv) < 2:
        print(USAGE, file=sys.stderr)
        return 2
    return run_hook_cli(argv[1], argv[2:])


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log_guardian("ERROR", f"Git guardian error: {type(e).__name__}: {e}")
        print(f"[guardian] Guardian system error: {e}", file=sys.stderr)
        sys.exit(1)
