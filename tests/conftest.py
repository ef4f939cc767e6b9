"""Pytest configuration -- bootstraps sys.path for guardian imports."""
import sys
from pathlib import Path

import pytest

# Ensure tests/ directory is on sys.path so _bootstrap can be imported
sys.path.insert(0, str(Path(__file__).resolve().parent))
import _bootstrap  # noqa: F401, E402

from _guardian_utils import configure_log_file  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_log_file():
    """Tests that load a HookConfig point the module-level log file somewhere."""
    yield
    configure_log_file(None)
