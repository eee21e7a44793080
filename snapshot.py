# snapshot.py — write data/albums.json from the image folders
import json
import logging
import os
from pathlib import Path

from albums import scan_albums
from errors import StoreError

log = logging.getLogger(__name__)


def atomic_write_text(path: Path, data: str):
    """Write to a sibling temp file, then swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


def generate_snapshot(image_root: Path, output_path: Path, public_prefix: str, placeholder: str):
    """
    Scan every album folder under image_root and write the full
    {album: {preview, images}} document to output_path.
    Returns the written document.
    """
    image_root, output_path = Path(image_root), Path(output_path)
    log.info("Reading albums from %s", image_root)
    if not image_root.is_dir():
        raise StoreError(f"Image root not found: {image_root}")

    try:
        albums = scan_albums(image_root, public_prefix, placeholder)
    except OSError as exc:
        raise StoreError(f"Could not scan {image_root}: {exc}") from exc

    document = {name: album.to_dict() for name, album in albums.items()}
    for name, album in albums.items():
        log.info("Album %s: %d images", name, album.count)

    payload = json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
    try:
        atomic_write_text(output_path, payload)
    except OSError as exc:
        raise StoreError(f"Could not write snapshot {output_path}: {exc}") from exc
    log.info("Wrote %d albums to %s", len(document), output_path)
    return document
