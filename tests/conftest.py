import sys
from pathlib import Path
import pytest

# Ensure project root is on sys.path so tests can import the `dobble` package
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_cache():
	# Clear the shared in-memory cache between tests to avoid cross-test leakage
	from dobble.cache import get_cache
	get_cache().clear()
	yield
