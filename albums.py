# albums.py — album model, image filtering and preview selection
import logging
from dataclasses import dataclass
from pathlib import Path

from errors import InvalidAlbumId

log = logging.getLogger(__name__)

# Canonical allow-list, shared by every store and both batch jobs
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tiff"})
PREVIEW_MARKER = "preview"


@dataclass(frozen=True)
class Album:
    name: str
    images: tuple[str, ...]
    preview: str

    @property
    def count(self) -> int:
        return len(self.images)

    def to_dict(self):
        return {"preview": self.preview, "images": list(self.images)}

    def summary(self):
        return {"preview": self.preview, "count": self.count}


def is_image(file_name: str) -> bool:
    """True if the file extension (any case) is a supported image type."""
    if not isinstance(file_name, str):
        return False
    return Path(file_name).suffix.lower() in IMAGE_EXTENSIONS


def choose_preview(file_names):
    """
    Pick the preview among already sorted file names:
    a name containing "preview" first, otherwise the first name.
    Returns None for an empty album.
    """
    for name in file_names:
        if PREVIEW_MARKER in name.lower():
            return name
    return file_names[0] if file_names else None


def public_url(prefix: str, album: str, file_name: str) -> str:
    return f"{prefix.rstrip('/')}/{album}/{file_name}"


def list_image_names(directory: Path) -> list[str]:
    """Sorted image file names directly inside directory."""
    return sorted(
        p.name for p in directory.iterdir() if p.is_file() and is_image(p.name)
    )


def build_album(name: str, file_names, prefix: str, placeholder: str) -> Album:
    names = sorted(file_names)
    preview_name = choose_preview(names)
    if preview_name is None:
        log.warning("Album %r contains no images, using placeholder preview", name)
        preview = placeholder
    else:
        preview = public_url(prefix, name, preview_name)
    return Album(
        name=name,
        images=tuple(public_url(prefix, name, n) for n in names),
        preview=preview,
    )


def album_dirs(image_root: Path) -> list[Path]:
    """Album subdirectories of image_root in name order."""
    return sorted((p for p in image_root.iterdir() if p.is_dir()), key=lambda p: p.name)


def scan_albums(image_root: Path, prefix: str, placeholder: str) -> dict[str, Album]:
    albums = {}
    for folder in album_dirs(image_root):
        albums[folder.name] = build_album(
            folder.name, list_image_names(folder), prefix, placeholder
        )
    return albums


def validate_album_id(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidAlbumId("Album id must be a non-empty string")
    return raw.strip()
