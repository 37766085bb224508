from ltm_client.schemas.ltm import (
    ObjectPath,
    Certificate,
    ClientSSLProfile,
    VirtualProfileRef,
    VirtualServer,
    VirtualRef,
    ExpiryReportRow,
)

__all__ = [
    'ObjectPath',
    'Certificate',
    'ClientSSLProfile',
    'VirtualProfileRef',
    'VirtualServer',
    'VirtualRef',
    'ExpiryReportRow',
]
