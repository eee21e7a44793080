import pytest

from config import Settings
from main import create_app
from tests.fakes import FakeClient


def touch(folder, *names):
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / name).write_bytes(b"\x89PNG fake")


@pytest.fixture
def image_root(tmp_path):
    root = tmp_path / "images"
    touch(root / "trip", "b.png", "a.jpg", "preview.png", "notes.txt")
    touch(root / "solo", "z.gif")
    (root / "empty").mkdir()
    (root / "readme.txt").write_text("not an album")
    return root


@pytest.fixture
def settings(image_root, tmp_path):
    return Settings(
        image_root=image_root,
        snapshot_path=tmp_path / "data" / "albums.json",
        placeholder_url="/images/placeholder.jpg",
    )


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
