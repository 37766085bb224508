import os
import sys
from dotenv import load_dotenv

from ltm_client.core.exceptions import ConfigurationError

load_dotenv()  # Loads variables from a .env file if present

# =============================================================================
# Connection settings. Credentials have no defaults: callers pass them
# explicitly or the CLI resolves them through require_env().
# =============================================================================

def require_env(var_name: str, description: str) -> str:
    """Require an environment variable, fail with helpful message if missing."""
    value = os.getenv(var_name)
    if not value:
        print(f"\n❌ FATAL: Required environment variable '{var_name}' is not set.", file=sys.stderr)
        print(f"   Description: {description}", file=sys.stderr)
        print(f"   Please set it in your .env file or environment.\n", file=sys.stderr)
        raise ConfigurationError(var_name, "required environment variable is not configured")
    return value


def parse_verify(value: str):
    """
    Interpret F5_VERIFY_TLS: boolean words map to True/False, anything else is a CA bundle path.
    """
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    return value.strip()


F5_HOST = os.getenv("F5_HOST")
F5_USERNAME = os.getenv("F5_USERNAME")
F5_PASSWORD = os.getenv("F5_PASSWORD")
F5_LOGIN_PROVIDER = os.getenv("F5_LOGIN_PROVIDER", "tmos")

F5_VERIFY_TLS = parse_verify(os.getenv("F5_VERIFY_TLS", "true"))
F5_TIMEOUT = float(os.getenv("F5_TIMEOUT", "30"))

# Deep-mode fan-out: one profile-list request per virtual server
F5_MAX_WORKERS = int(os.getenv("F5_MAX_WORKERS", "8"))

# Tokens are valid for 20 minutes on the device; renew a little earlier
F5_SESSION_RENEWAL_MINUTES = int(os.getenv("F5_SESSION_RENEWAL_MINUTES", "18"))

# Report horizon
EXPIRES_IN_DAYS = int(os.getenv("EXPIRES_IN_DAYS", "30"))

# Parent profile for newly created client-ssl profiles
DEFAULT_CLIENT_SSL_PARENT = os.getenv("DEFAULT_CLIENT_SSL_PARENT", "/Common/clientssl")
