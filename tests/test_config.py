from pathlib import Path

import pytest

from config import Settings
from errors import ConfigError
from main import create_app


def test_defaults_from_empty_env():
    settings = Settings.from_env({})
    assert settings.album_store == "filesystem"
    assert settings.public_prefix == "/images"
    assert not settings.has_supabase
    assert settings.validate() is settings


def test_env_overrides():
    settings = Settings.from_env(
        {
            "ALBUM_STORE": " Snapshot ",
            "IMAGE_ROOT": "/srv/images",
            "SNAPSHOT_PATH": "/srv/albums.json",
            "SUPABASE_URL": "https://x.supabase.co",
            "SUPABASE_ANON_KEY": "anon",
            "SUPABASE_SERVICE_ROLE_KEY": "service",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.album_store == "snapshot"
    assert settings.image_root == Path("/srv/images")
    assert settings.snapshot_path == Path("/srv/albums.json")
    assert settings.supabase_key == "service"
    assert settings.log_level == "DEBUG"
    assert settings.has_supabase


def test_anon_key_used_without_service_role():
    settings = Settings.from_env({"SUPABASE_URL": "https://x", "SUPABASE_ANON_KEY": "anon"})
    assert settings.supabase_key == "anon"


def test_unknown_store_is_rejected():
    with pytest.raises(ConfigError, match="ALBUM_STORE"):
        Settings(album_store="s3").validate()


def test_prefix_must_be_absolute():
    with pytest.raises(ConfigError):
        Settings(public_prefix="images").validate()


@pytest.mark.parametrize(
    "env",
    [
        {"ALBUM_STORE": "supabase"},
        {"ALBUM_STORE": "supabase", "SUPABASE_URL": "https://x.supabase.co"},
        {"ALBUM_STORE": "supabase", "SUPABASE_ANON_KEY": "anon"},
    ],
)
def test_supabase_store_needs_credentials_at_startup(env):
    with pytest.raises(ConfigError, match="Supabase is not configured"):
        create_app(Settings.from_env(env))


def test_unknown_timezone_is_config_error():
    with pytest.raises(ConfigError, match="DISPLAY_TIMEZONE"):
        Settings(display_timezone="Mars/Olympus_Mons").validate()
    with pytest.raises(ConfigError):
        create_app(Settings.from_env({"DISPLAY_TIMEZONE": "Nowhere/Atlantis"}))
