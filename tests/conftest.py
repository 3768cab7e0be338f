import io
import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'profileready' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from profileready.config import get_settings  # noqa: E402
from profileready.domain.presets import Overlay  # noqa: E402


def png_bytes(w=8, h=8, color=(128, 64, 32), alpha=None, fmt="PNG") -> bytes:
    channels = 3 if alpha is None else 4
    arr = np.zeros((h, w, channels), dtype=np.uint8)
    arr[:, :, :3] = color
    if alpha is not None:
        arr[:, :, 3] = alpha
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format=fmt)
    return buf.getvalue()


def write_overlay(path: Path, size=40, inner=(10, 30)) -> Path:
    """Transparent square with an opaque red block in the middle."""
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    lo, hi = inner
    arr[lo:hi, lo:hi] = (255, 0, 0, 255)
    Image.fromarray(arr).save(path, format="PNG")
    return path


@pytest.fixture()
def make_png():
    return png_bytes


@pytest.fixture()
def overlay_dir(tmp_path) -> Path:
    directory = tmp_path / "overlays"
    directory.mkdir()
    for overlay in Overlay:
        write_overlay(directory / overlay.filename)
    return directory


@pytest.fixture(scope="session")
def app_dirs(tmp_path_factory):
    root = tmp_path_factory.mktemp("profileready")
    overlays = root / "overlays"
    overlays.mkdir()
    for overlay in Overlay:
        write_overlay(overlays / overlay.filename)
    env = {
        "UPLOAD_DIR": str(root / "uploads"),
        "STATIC_DIR": str(root / "static"),
        "OVERLAY_DIR": str(overlays),
        "SCRATCH_DIR": str(root / "scratch"),
        "SUPABASE_DISABLED": "1",
        "EXECUTOR_BACKEND": "pillow",
    }
    mp = pytest.MonkeyPatch()
    for key, value in env.items():
        mp.setenv(key, value)
    get_settings.cache_clear()
    yield root
    mp.undo()
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def client(app_dirs) -> TestClient:
    # lazy import after env configured
    from profileready.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def auth_header() -> dict[str, str]:
    # any token is accepted in disabled mode
    return {"Authorization": "Bearer test-token"}
