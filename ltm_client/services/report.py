# ltm_client/services/report.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ltm_client.core import config
from ltm_client.core.enums import VirtualsStatus
from ltm_client.core.logger import get_service_logger
from ltm_client.schemas.ltm import ExpiryReportRow, VirtualRef
from ltm_client.services.crossref import CertificateMatch, cross_reference
from ltm_client.services.fetchers import fetch_inventory
from ltm_client.services.session import LTMClient

logger = get_service_logger()


def _virtuals_status(match: CertificateMatch) -> VirtualsStatus:
    if not match.virtuals_checked:
        return VirtualsStatus.NOT_CHECKED
    return VirtualsStatus.CHECKED if match.virtuals else VirtualsStatus.CHECKED_EMPTY


def to_report_row(match: CertificateMatch) -> ExpiryReportRow:
    cert = match.certificate
    virtuals = None
    if match.virtuals:
        virtuals = [VirtualRef(id=str(vs.id), description=vs.description) for vs in match.virtuals]
    return ExpiryReportRow(
        certificate_id=str(cert.id),
        partition=cert.partition,
        profile_id=str(match.profile.id) if match.profile else None,
        expiration=cert.expiration,
        subject=cert.subject,
        subject_alt_name=cert.subject_alternative_name,
        virtuals=virtuals,
        virtuals_status=_virtuals_status(match),
    )


def build_report(matches: Iterable[CertificateMatch]) -> List[ExpiryReportRow]:
    return [to_report_row(m) for m in matches]


def get_expiring_or_expired_certificates(
    client: LTMClient,
    expires_in_days: Optional[int] = None,
    fetch_virtuals: bool = True,
    max_workers: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[ExpiryReportRow]:
    """
    Report every certificate expiring within expires_in_days (or already expired),
    with the client-ssl profiles using it and, when fetch_virtuals is set, the
    virtual servers using those profiles.

    Any failed fetch aborts the report; there are no partial results.
    """
    if expires_in_days is None:
        expires_in_days = config.EXPIRES_IN_DAYS

    inventory = fetch_inventory(client, deep=fetch_virtuals, max_workers=max_workers)
    matches = cross_reference(
        inventory.certificates,
        inventory.profiles,
        inventory.virtuals,
        expires_in_days=expires_in_days,
        deep=fetch_virtuals,
        now=now,
    )
    rows = build_report(matches)

    certs_reported = len({row.certificate_id for row in rows})
    logger.info(
        f"Expiry report for {client.host}: {certs_reported} of {len(inventory.certificates)} certificates "
        f"expire within {expires_in_days} days ({len(rows)} rows)"
    )
    return rows
