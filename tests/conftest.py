import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'cardcreatr' and helpers/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from cardcreatr.data import clear_caches
from helpers.fonts import build_test_font
from helpers.images import png_bytes


@pytest.fixture(autouse=True)
def _reset_data_caches():
    """Bundled-data caches must not leak between tests."""
    clear_caches()
    yield
    clear_caches()


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    return build_test_font()


@pytest.fixture
def asset_dir(tmp_path: Path, font_bytes: bytes) -> Path:
    """A directory holding one image, one font and one text file."""
    (tmp_path / "art.png").write_bytes(png_bytes(20, 30))
    (tmp_path / "body.ttf").write_bytes(font_bytes)
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")
    return tmp_path
