import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upper bound for leaving the Loading state when the identity provider hangs
AUTH_RESOLUTION_TIMEOUT_SECONDS = float(os.getenv("AUTH_RESOLUTION_TIMEOUT_SECONDS", "5"))

PLACEHOLDER_VALUES = {"https://placeholder.supabase.co", "placeholder-key"}


class ConfigurationError(RuntimeError):
    pass


def validate_supabase_config(url=None, key=None):
    """Check the Supabase connection settings before any client is created.

    Missing values, the placeholder values shipped in example env files and
    URLs without an http(s) scheme are all rejected.
    """
    url = SUPABASE_URL if url is None else url
    key = SUPABASE_KEY if key is None else key

    if not url or not key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set (check your .env file)")
    if url in PLACEHOLDER_VALUES or key in PLACEHOLDER_VALUES:
        raise ConfigurationError("Supabase settings still hold placeholder values")
    if not url.startswith(("http://", "https://")):
        raise ConfigurationError("SUPABASE_URL must be a valid URL starting with http:// or https://")

    return url, key
