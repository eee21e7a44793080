import json

import pytest

from errors import StoreError
from snapshot import generate_snapshot
from stores import FilesystemStore, SnapshotStore
from tests.conftest import touch

PLACEHOLDER = "/images/placeholder.jpg"


def test_snapshot_contains_full_albums(image_root, tmp_path):
    output = tmp_path / "data" / "nested" / "albums.json"
    document = generate_snapshot(image_root, output, "/images", PLACEHOLDER)

    assert output.exists()
    on_disk = json.loads(output.read_text(encoding="utf-8"))
    assert on_disk == document
    assert on_disk["trip"] == {
        "preview": "/images/trip/preview.png",
        "images": ["/images/trip/a.jpg", "/images/trip/b.png", "/images/trip/preview.png"],
    }
    assert on_disk["solo"]["preview"] == "/images/solo/z.gif"
    assert on_disk["empty"] == {"preview": PLACEHOLDER, "images": []}
    assert "readme.txt" not in on_disk


def test_snapshot_is_byte_identical_on_rerun(image_root, tmp_path):
    first, second = tmp_path / "one.json", tmp_path / "two.json"
    generate_snapshot(image_root, first, "/images", PLACEHOLDER)
    generate_snapshot(image_root, second, "/images", PLACEHOLDER)
    assert first.read_bytes() == second.read_bytes()


def test_snapshot_overwrites_without_leftovers(image_root, tmp_path):
    output = tmp_path / "albums.json"
    generate_snapshot(image_root, output, "/images", PLACEHOLDER)
    touch(image_root / "later", "x.webp")
    generate_snapshot(image_root, output, "/images", PLACEHOLDER)
    assert "later" in json.loads(output.read_text(encoding="utf-8"))
    assert [p.name for p in tmp_path.iterdir() if p.suffix == ".tmp"] == []


def test_snapshot_missing_root_fails(tmp_path):
    output = tmp_path / "albums.json"
    with pytest.raises(StoreError, match="Image root not found"):
        generate_snapshot(tmp_path / "nope", output, "/images", PLACEHOLDER)
    assert not output.exists()


def test_snapshot_store_agrees_with_filesystem(image_root, tmp_path):
    output = tmp_path / "albums.json"
    generate_snapshot(image_root, output, "/images", PLACEHOLDER)
    live = FilesystemStore(image_root, "/images", PLACEHOLDER)
    cached = SnapshotStore(output)
    assert cached.list_album_summaries() == live.list_album_summaries()
    assert cached.get_album("trip") == live.get_album("trip")
