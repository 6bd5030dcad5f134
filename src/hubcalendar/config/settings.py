"""Runtime settings for the calendar feed service."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytz
from dotenv import load_dotenv

from hubcalendar.config.constants import (
    DEFAULT_DURATION_MINUTES,
    REFERENCE_TIMEZONE,
    URL_ENV_VAR,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def has_fixed_offset(tz_name: str, year: Optional[int] = None) -> bool:
    """Check that a zone keeps one UTC offset all year.

    Winter and summer offsets are compared, which covers both hemispheres.

    Raises:
        pytz.UnknownTimeZoneError: If the zone is not known.
    """
    tzobj = pytz.timezone(tz_name)
    year = year or datetime.now().year
    offsets = {
        tzobj.localize(datetime(year, month, 1, 12)).utcoffset()
        for month in (1, 7)
    }
    return len(offsets) == 1


@dataclass(frozen=True)
class FeedSettings:
    """Settings for feed generation and the backing store."""

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    # The feed declares one STANDARD offset, so the zone must not observe DST
    timezone: str = REFERENCE_TIMEZONE
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES
    # Stamps are emitted without the UTC designator unless this is set
    utc_stamp_suffix: bool = False
    store_timeout: float = 10.0
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self):
        if self.default_duration_minutes <= 0:
            raise ValueError(
                f"default_duration_minutes must be positive, got {self.default_duration_minutes}"
            )
        try:
            fixed = has_fixed_offset(self.timezone)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e
        if not fixed:
            raise ValueError(
                f"Timezone {self.timezone} observes DST; only fixed-offset zones are supported"
            )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %r", name, raw)
        return default


def load_settings(env_file: Optional[str] = None) -> FeedSettings:
    """Build settings from the environment, loading a .env file first.

    Args:
        env_file: Optional explicit path to a .env file.

    Returns:
        A populated FeedSettings instance.
    """
    # Existing process variables win over the .env file
    load_dotenv(env_file, override=False)

    from hubcalendar.storage.credentials import load_service_key

    duration = _env_number("HUBCAL_DEFAULT_DURATION_MINUTES", DEFAULT_DURATION_MINUTES, int)
    if duration <= 0:
        logger.warning("Default duration must be positive, using %d", DEFAULT_DURATION_MINUTES)
        duration = DEFAULT_DURATION_MINUTES

    tz_name = os.environ.get("HUBCAL_TIMEZONE") or REFERENCE_TIMEZONE
    try:
        fixed = has_fixed_offset(tz_name)
    except pytz.UnknownTimeZoneError:
        fixed = False
    if not fixed:
        logger.warning(
            "Timezone %s is unknown or observes DST, using %s", tz_name, REFERENCE_TIMEZONE
        )
        tz_name = REFERENCE_TIMEZONE

    return FeedSettings(
        supabase_url=os.environ.get(URL_ENV_VAR) or None,
        supabase_key=load_service_key(),
        timezone=tz_name,
        default_duration_minutes=duration,
        utc_stamp_suffix=_env_bool("HUBCAL_UTC_STAMP_SUFFIX", False),
        store_timeout=_env_number("HUBCAL_STORE_TIMEOUT", 10.0, float),
        host=os.environ.get("HUBCAL_HOST") or "0.0.0.0",
        port=_env_number("HUBCAL_PORT", 8000, int),
        log_level=(os.environ.get("HUBCAL_LOG_LEVEL") or "INFO").upper(),
    )
