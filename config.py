# config.py — environment settings, read once at startup
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import ConfigError

BASE_DIR = Path(__file__).parent.resolve()

STORE_KINDS = ("filesystem", "snapshot", "supabase")


@dataclass(frozen=True)
class Settings:
    album_store: str = "filesystem"
    image_root: Path = BASE_DIR / "static" / "images"
    public_prefix: str = "/images"
    snapshot_path: Path = BASE_DIR / "data" / "albums.json"
    placeholder_url: str = "/images/placeholder.jpg"
    supabase_url: str | None = None
    supabase_key: str | None = None
    guestbook_table: str = "guestbook"
    display_timezone: str = "UTC"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            album_store=env.get("ALBUM_STORE", defaults.album_store).strip().lower(),
            image_root=Path(env["IMAGE_ROOT"]) if env.get("IMAGE_ROOT") else defaults.image_root,
            public_prefix=env.get("PUBLIC_PREFIX", defaults.public_prefix),
            snapshot_path=(
                Path(env["SNAPSHOT_PATH"]) if env.get("SNAPSHOT_PATH") else defaults.snapshot_path
            ),
            placeholder_url=env.get("PLACEHOLDER_URL", defaults.placeholder_url),
            supabase_url=env.get("SUPABASE_URL") or None,
            # service role key wins when both are set
            supabase_key=(
                env.get("SUPABASE_SERVICE_ROLE_KEY") or env.get("SUPABASE_ANON_KEY") or None
            ),
            guestbook_table=env.get("GUESTBOOK_TABLE", defaults.guestbook_table),
            display_timezone=env.get("DISPLAY_TIMEZONE", defaults.display_timezone),
            secret_key=env.get("SECRET_KEY", defaults.secret_key),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        )

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def require_supabase(self):
        """Raise ConfigError unless both Supabase URL and key are present."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY")
        if missing:
            raise ConfigError(f"Supabase is not configured: missing {', '.join(missing)}")

    def validate(self):
        if self.album_store not in STORE_KINDS:
            raise ConfigError(
                f"ALBUM_STORE must be one of {', '.join(STORE_KINDS)}, got {self.album_store!r}"
            )
        if self.album_store == "supabase":
            self.require_supabase()
        if not self.public_prefix.startswith("/"):
            raise ConfigError(f"PUBLIC_PREFIX must start with '/', got {self.public_prefix!r}")
        try:
            ZoneInfo(self.display_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown DISPLAY_TIMEZONE {self.display_timezone!r}") from exc
        return self
