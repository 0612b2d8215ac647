import os
import sys
from pathlib import Path

import pytest


# Put `src/backend` first on sys.path so `import common...` resolves when pytest
# runs from the repository root (testpaths in pyproject.toml).
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)


REPO_POLICIES_DIR = Path(BACKEND_DIR).parents[1] / "policies"


@pytest.fixture
def repo_policies_dir() -> Path:
    return REPO_POLICIES_DIR
