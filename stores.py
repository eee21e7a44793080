# stores.py — the three interchangeable album stores
import json
import logging
from pathlib import Path
from typing import Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import create_client

from albums import Album, build_album, choose_preview, list_image_names, public_url, album_dirs
from errors import StoreError
from results import LoadResult

log = logging.getLogger(__name__)

QUERY_ERRORS = (APIError, httpx.HTTPError)


class AlbumStore(Protocol):
    def get_album(self, name: str) -> Album | None: ...

    def list_album_summaries(self) -> dict[str, dict]: ...


def load_catalog(store: AlbumStore) -> LoadResult:
    try:
        return LoadResult(items=store.list_album_summaries())
    except StoreError as exc:
        log.exception("Album catalog load failed")
        return LoadResult(items={}, error=str(exc))


# ===== Filesystem (live directory scan) =====
class FilesystemStore:
    def __init__(self, image_root: Path, public_prefix: str, placeholder: str):
        self.image_root = Path(image_root)
        self.public_prefix = public_prefix
        self.placeholder = placeholder

    def _check_root(self):
        if not self.image_root.is_dir():
            raise StoreError(f"Image root not found: {self.image_root}")

    def get_album(self, name: str) -> Album | None:
        self._check_root()
        # an album id names exactly one entry of the image root
        if name in (".", "..") or "/" in name or "\\" in name:
            return None
        folder = self.image_root / name
        if not folder.is_dir():
            return None
        try:
            names = list_image_names(folder)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Could not read album {name!r}: {exc}") from exc
        return build_album(name, names, self.public_prefix, self.placeholder)

    def list_album_summaries(self) -> dict[str, dict]:
        self._check_root()
        summaries = {}
        try:
            for folder in album_dirs(self.image_root):
                names = list_image_names(folder)
                preview = choose_preview(names)
                summaries[folder.name] = {
                    "preview": (
                        public_url(self.public_prefix, folder.name, preview)
                        if preview else self.placeholder
                    ),
                    "count": len(names),
                }
        except OSError as exc:
            raise StoreError(f"Could not list albums under {self.image_root}: {exc}") from exc
        return summaries


# ===== JSON snapshot =====
class SnapshotStore:
    """Reads the generated albums.json on every call."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, Album]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as exc:
            raise StoreError(
                f"Album snapshot not found at {self.path}; run `flask generate-snapshot`"
            ) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreError(f"Album snapshot {self.path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Could not read album snapshot {self.path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise StoreError(f"Album snapshot {self.path} must contain an object")
        albums = {}
        for name, entry in raw.items():
            if (
                not isinstance(entry, dict)
                or not isinstance(entry.get("preview"), str)
                or not isinstance(entry.get("images"), list)
            ):
                raise StoreError(f"Malformed snapshot entry for album {name!r}")
            albums[name] = Album(name=name, images=tuple(entry["images"]), preview=entry["preview"])
        return albums

    def get_album(self, name: str) -> Album | None:
        return self._load().get(name)

    def list_album_summaries(self) -> dict[str, dict]:
        return {name: album.summary() for name, album in self._load().items()}


# ===== Supabase tables: albums(id, name, preview_url), images(id, album_id, url, order) =====
class SupabaseStore:
    def __init__(self, client, placeholder: str):
        self.client = client
        self.placeholder = placeholder

    def _find_album_row(self, name: str):
        res = (
            self.client.table("albums")
            .select("id,name,preview_url")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None

    def get_album(self, name: str) -> Album | None:
        try:
            row = self._find_album_row(name)
            if row is None:
                return None
            res = (
                self.client.table("images")
                .select("url")
                .eq("album_id", row["id"])
                .order("order")
                .execute()
            )
        except QUERY_ERRORS as exc:
            raise StoreError(f"Supabase query for album {name!r} failed: {exc}") from exc
        images = tuple(r["url"] for r in res.data or [])
        return Album(name=name, images=images, preview=row.get("preview_url") or self.placeholder)

    def list_album_summaries(self) -> dict[str, dict]:
        summaries = {}
        try:
            res = self.client.table("albums").select("id,name,preview_url").order("id").execute()
            for row in res.data or []:
                counted = (
                    self.client.table("images")
                    .select("id", count="exact", head=True)
                    .eq("album_id", row["id"])
                    .execute()
                )
                summaries[row["name"]] = {
                    "preview": row.get("preview_url") or self.placeholder,
                    "count": counted.count or 0,
                }
        except QUERY_ERRORS as exc:
            raise StoreError(f"Supabase album listing failed: {exc}") from exc
        return summaries


def supabase_client(settings):
    settings.require_supabase()
    return create_client(settings.supabase_url, settings.supabase_key)


def build_store(settings, client=None) -> AlbumStore:
    """Store selected by settings.album_store."""
    kind = settings.album_store
    if kind == "filesystem":
        store = FilesystemStore(settings.image_root, settings.public_prefix, settings.placeholder_url)
    elif kind == "snapshot":
        store = SnapshotStore(settings.snapshot_path)
    elif kind == "supabase":
        store = SupabaseStore(client or supabase_client(settings), settings.placeholder_url)
    else:
        # Settings.validate() rejects this first
        raise ValueError(f"Unknown album store {kind!r}")
    log.info("Using %s album store", kind)
    return store
