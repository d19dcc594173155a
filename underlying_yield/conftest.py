import sys
from pathlib import Path

_repo_root = Path(__file__).parent.parent
_repo_root_str = str(_repo_root)


def pytest_configure(config):
    if _repo_root_str not in sys.path:
        sys.path.insert(0, _repo_root_str)
