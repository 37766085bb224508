"""
ltm_client - thin client over the BIG-IP LTM iControl REST API.

Usage:
    from ltm_client import LTMClient, get_expiring_or_expired_certificates

    with LTMClient("bigip.example.net", "admin", "secret", verify=False) as client:
        rows = get_expiring_or_expired_certificates(client, expires_in_days=30)
"""

from ltm_client.core.exceptions import (
    LTMClientError,
    AuthenticationError,
    TransportError,
    ConfigurationError,
)
from ltm_client.schemas.ltm import ObjectPath, ExpiryReportRow
from ltm_client.services.session import LTMClient, LTMSession
from ltm_client.services.fetchers import (
    fetch_certificates,
    fetch_client_ssl_profiles,
    fetch_virtuals,
    fetch_inventory,
)
from ltm_client.services.crossref import cross_reference
from ltm_client.services.report import get_expiring_or_expired_certificates, build_report
from ltm_client.services.operations import (
    upload_file,
    upload_bytes,
    upload_certificate_and_key,
    install_key,
    install_certificate,
    create_client_ssl_profile,
    update_client_ssl_profile,
    run_bash,
    list_pools,
    list_nodes,
    list_virtuals,
)

__version__ = "1.0.0"

__all__ = [
    # Errors
    'LTMClientError', 'AuthenticationError', 'TransportError', 'ConfigurationError',
    # Session
    'LTMClient', 'LTMSession',
    # Schemas
    'ObjectPath', 'ExpiryReportRow',
    # Fetchers
    'fetch_certificates', 'fetch_client_ssl_profiles', 'fetch_virtuals', 'fetch_inventory',
    # Report
    'cross_reference', 'build_report', 'get_expiring_or_expired_certificates',
    # Operations
    'upload_file', 'upload_bytes', 'upload_certificate_and_key',
    'install_key', 'install_certificate',
    'create_client_ssl_profile', 'update_client_ssl_profile',
    'run_bash', 'list_pools', 'list_nodes', 'list_virtuals',
]
