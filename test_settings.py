from pathlib import Path

import pytest

from hubcalendar.config.settings import FeedSettings, has_fixed_offset, load_settings
from hubcalendar.storage import credentials

MANAGED_VARS = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_KEY",
    "HUBCAL_TIMEZONE",
    "HUBCAL_DEFAULT_DURATION_MINUTES",
    "HUBCAL_UTC_STAMP_SUFFIX",
    "HUBCAL_STORE_TIMEOUT",
    "HUBCAL_HOST",
    "HUBCAL_PORT",
    "HUBCAL_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # setenv + delenv makes monkeypatch remove anything load_dotenv sets later
    for var in MANAGED_VARS:
        monkeypatch.setenv(var, "placeholder")
        monkeypatch.delenv(var)
    monkeypatch.setattr(credentials, "load_from_keyring", lambda: None)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.supabase_url is None
    assert settings.supabase_key is None
    assert settings.timezone == "America/Mexico_City"
    assert settings.default_duration_minutes == 120
    assert settings.utc_stamp_suffix is False
    assert settings.port == 8000


def test_reads_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "SUPABASE_URL=https://project.supabase.co\n"
        "SUPABASE_SERVICE_ROLE_KEY=secret-service-key\n"
        "HUBCAL_DEFAULT_DURATION_MINUTES=90\n"
        "HUBCAL_UTC_STAMP_SUFFIX=true\n"
        "HUBCAL_LOG_LEVEL=debug\n"
    )

    settings = load_settings(str(env_file))

    assert settings.supabase_url == "https://project.supabase.co"
    assert settings.supabase_key == "secret-service-key"
    assert settings.default_duration_minutes == 90
    assert settings.utc_stamp_suffix is True
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HUBCAL_PORT", "eighty")
    monkeypatch.setenv("HUBCAL_DEFAULT_DURATION_MINUTES", "-5")

    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.port == 8000
    assert settings.default_duration_minutes == 120


def test_service_key_prefers_service_role(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

    key, source = credentials.get_service_key_source()

    assert key == "service-key"
    assert "SUPABASE_SERVICE_ROLE_KEY" in source


def test_service_key_from_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(credentials, "load_from_keyring", lambda: "keyring-key")

    assert credentials.get_service_key_source() == ("keyring-key", "OS Keyring")


def test_service_key_from_user_config(tmp_path: Path) -> None:
    env_file = credentials.get_env_file_path()
    env_file.parent.mkdir(parents=True)
    env_file.write_text("SUPABASE_KEY='file-key'\n")

    key, source = credentials.get_service_key_source()

    assert key == "file-key"
    assert str(env_file) in source


def test_no_service_key() -> None:
    assert credentials.load_service_key() is None


@pytest.mark.parametrize("fields", [
    {"default_duration_minutes": 0},
    {"default_duration_minutes": -30},
    {"timezone": "America/New_York"},
    {"timezone": "Australia/Sydney"},
    {"timezone": "Mars/Olympus_Mons"},
])
def test_feed_settings_rejects_invalid_values(fields) -> None:
    with pytest.raises(ValueError):
        FeedSettings(**fields)


def test_fixed_offset_zones_accepted() -> None:
    assert FeedSettings(timezone="UTC").timezone == "UTC"
    assert has_fixed_offset("America/Mexico_City", 2026)
    assert not has_fixed_offset("Europe/Madrid", 2026)


@pytest.mark.parametrize("zone", ["Europe/Madrid", "Not/AZone"])
def test_load_settings_falls_back_from_unsupported_zone(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, zone: str
) -> None:
    monkeypatch.setenv("HUBCAL_TIMEZONE", zone)

    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.timezone == "America/Mexico_City"
