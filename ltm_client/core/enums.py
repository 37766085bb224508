# core/enums.py
"""
Enumeration types for the LTM client.
Replaces magic strings with type-safe enums.
"""
from enum import Enum


class VirtualsStatus(str, Enum):
    """Whether a report row's virtual servers were looked up, and with what outcome."""
    NOT_CHECKED = "not_checked"      # deep mode off, or no profile to look for
    CHECKED_EMPTY = "checked_empty"  # looked up, no virtual uses the profile
    CHECKED = "checked"              # looked up, at least one virtual found


class ProfileType(str, Enum):
    """SSL profile types on F5 read by the client."""
    CLIENT_SSL = "client-ssl"


class Partition(str, Enum):
    """Common F5 partition names."""
    COMMON = "Common"


class ReportFormat(str, Enum):
    """Output formats of the report CLI."""
    TABLE = "table"
    JSON = "json"
    CSV = "csv"
