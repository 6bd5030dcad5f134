"""Centralized constants for hubcalendar.

Calendar metadata, the reference timezone and the fixed strings that end up
in every generated feed live here so the builder never carries literals.
"""

# Calendar document metadata
ICS_PRODID = "-//Hub de Comunidades//Eventos//ES"
ICS_VERSION = "2.0"
ICS_CALSCALE = "GREGORIAN"
ICS_METHOD = "PUBLISH"

# Calendar naming
DEFAULT_CALENDAR_NAME = "Hub de Comunidades - Eventos"
CALENDAR_NAME_PREFIX = "Hub de Comunidades - "
CALENDAR_NAME_SEPARATOR = ", "
MAX_NAMED_SOURCES = 4

# Reference timezone for "today" and for local event times
REFERENCE_TIMEZONE = "America/Mexico_City"

# Event field defaults
UID_DOMAIN = "hubdecomunidades.mx"
DEFAULT_ORGANIZER_NAME = "Hub de Comunidades"
ORGANIZER_MAILTO = "MAILTO:eventos@hubdecomunidades.mx"
VIRTUAL_LOCATION = "Evento Virtual"
EVENT_STATUS = "CONFIRMED"
DEFAULT_DURATION_MINUTES = 120

# Store query constants
APPROVED_STATUS = "approved"
EVENTS_TABLE = "events"
SOURCES_TABLE = "event_sources"
PREFERENCES_TABLE = "user_calendar_preferences"
EVENTS_SELECT = "*,organizer:organizer_id(name),source:source_id(name)"

# HTTP response constants
FEED_CONTENT_TYPE = "text/calendar; charset=utf-8"
FEED_FILENAME = "hubdecomunidades-eventos.ics"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Credential lookup (prefer the service-role key if both are set)
PREFERRED_KEY_ENV_VAR = "SUPABASE_SERVICE_ROLE_KEY"
PRIMARY_KEY_ENV_VAR = "SUPABASE_KEY"
URL_ENV_VAR = "SUPABASE_URL"
KEYRING_SERVICE_NAME = "hubcalendar"
KEYRING_ACCOUNT_NAME = "supabase_service_key"

# Values of the ``internal`` query parameter that disable internal events
INTERNAL_DISABLED_VALUES = {"false"}
