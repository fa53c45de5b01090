from __future__ import annotations

import sys
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _add_repo_root_to_syspath() -> None:
    """Make `montecarlo` importable when running tests from `tests/`.

    Some PyTest invocations end up with `tests/` as the import root. Ensure the
    repo root is on `sys.path` so `import montecarlo` works without installing.
    """

    root = Path(__file__).resolve().parents[1]
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)
