# core/exceptions.py
"""
Custom exception classes for the LTM client.
Every error names the phase that failed (authentication, a specific fetch, an upload...)
so callers can tell where a report or operation was aborted.
"""
from typing import Optional


class LTMClientError(Exception):
    """Base exception for all LTM client errors."""

    code: str = "LTM_ERROR"

    def __init__(self, message: str, code: str = None, phase: str = None):
        self.message = message
        self.phase = phase
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to JSON-serializable dict."""
        data = {
            "error": self.code,
            "message": self.message,
        }
        if self.phase:
            data["phase"] = self.phase
        return data


# =============================================================================
# F5/Device Exceptions
# =============================================================================

class AuthenticationError(LTMClientError):
    """Credentials rejected or session refused by the device (HTTP 401)."""
    code = "F5_AUTH_ERROR"

    def __init__(self, host: str, phase: str = "authentication", detail: str = None):
        message = f"Authentication failed for F5 device {host} during {phase}"
        if detail:
            message += f": {detail}"
        self.host = host
        super().__init__(message, phase=phase)


class TransportError(LTMClientError):
    """Network/TLS failure, non-2xx status other than 401, or an unreadable body."""
    code = "F5_TRANSPORT_ERROR"

    def __init__(self, host: str, phase: str, detail: str = None, status_code: Optional[int] = None):
        message = f"F5 request '{phase}' failed on {host}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if detail:
            message += f": {detail}"
        self.host = host
        self.status_code = status_code
        super().__init__(message, phase=phase)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(LTMClientError):
    """Missing or invalid input detected before any network call."""
    code = "CONFIGURATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(f"Configuration error for '{field}': {reason}", phase="configuration")
