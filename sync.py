# sync.py — push the image folders into the Supabase albums/images tables
import logging
from dataclasses import dataclass, field
from pathlib import Path

from albums import build_album, list_image_names, album_dirs
from errors import StoreError
from stores import QUERY_ERRORS

log = logging.getLogger(__name__)


@dataclass
class SyncReport:
    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    images: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


def upsert_album(client, album):
    """Insert or update the album row and replace its image rows. Returns (album_id, created)."""
    res = client.table("albums").select("id").eq("name", album.name).limit(1).execute()
    rows = res.data or []
    if rows:
        album_id = rows[0]["id"]
        client.table("albums").update({"preview_url": album.preview}).eq("id", album_id).execute()
        # not atomic: a crash between delete and insert leaves the album empty
        client.table("images").delete().eq("album_id", album_id).execute()
        created = False
    else:
        res = client.table("albums").insert({"name": album.name, "preview_url": album.preview}).execute()
        if not res.data:
            raise StoreError(f"Insert of album {album.name!r} returned no row")
        album_id = res.data[0]["id"]
        created = True

    if album.images:
        client.table("images").insert(
            [
                {"album_id": album_id, "url": url, "order": index}
                for index, url in enumerate(album.images)
            ]
        ).execute()
    return album_id, created


def sync_to_store(image_root: Path, client, public_prefix: str, placeholder: str) -> SyncReport:
    image_root = Path(image_root)
    log.info("Syncing albums from %s", image_root)
    if not image_root.is_dir():
        raise StoreError(f"Image root not found: {image_root}")

    report = SyncReport()
    try:
        folders = album_dirs(image_root)
    except OSError as exc:
        raise StoreError(f"Could not list {image_root}: {exc}") from exc

    for folder in folders:
        try:
            album = build_album(folder.name, list_image_names(folder), public_prefix, placeholder)
        except OSError as exc:
            raise StoreError(f"Could not read album folder {folder}: {exc}") from exc

        try:
            album_id, created = upsert_album(client, album)
        except (StoreError, *QUERY_ERRORS) as exc:
            # one bad album should not block the rest
            log.error("Syncing album %s failed: %s", album.name, exc)
            report.failed.append(album.name)
            continue

        (report.inserted if created else report.updated).append(album.name)
        report.images += album.count
        log.info(
            "%s album %s (id %s) with %d images",
            "Inserted" if created else "Updated", album.name, album_id, album.count,
        )

    log.info(
        "Sync finished: %d inserted, %d updated, %d failed",
        len(report.inserted), len(report.updated), len(report.failed),
    )
    return report
