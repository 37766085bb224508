# ltm_client/services/crossref.py
"""
Certificate -> client-ssl profile -> virtual server cross-reference.

Matching is by identity only:
  - a profile uses a certificate when profile.cert_ref == certificate.id
  - a virtual uses a profile when one of its attached profiles has the profile's id
Profiles and virtuals are indexed once, so each certificate costs two dict lookups.
Output order follows certificate fetch order, then profile order.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ltm_client.schemas.ltm import Certificate, ClientSSLProfile, ObjectPath, VirtualServer


@dataclass(frozen=True)
class CertificateMatch:
    certificate: Certificate
    profile: Optional[ClientSSLProfile] = None
    # None when not looked up or when no virtual uses the profile
    virtuals: Optional[List[VirtualServer]] = None
    virtuals_checked: bool = False


def expiry_horizon(expires_in_days: int, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=expires_in_days)


def filter_expiring(
    certificates: Iterable[Certificate],
    expires_in_days: int,
    now: Optional[datetime] = None,
) -> List[Certificate]:
    """
    Certificates expiring strictly before now + expires_in_days.
    One-sided: anything already expired is always kept, whatever the horizon.
    """
    horizon = expiry_horizon(expires_in_days, now)
    return [cert for cert in certificates if cert.expiration < horizon]


def index_profiles_by_cert(profiles: Iterable[ClientSSLProfile]) -> Dict[ObjectPath, List[ClientSSLProfile]]:
    index: Dict[ObjectPath, List[ClientSSLProfile]] = defaultdict(list)
    for profile in profiles:
        if profile.cert_ref is not None:
            index[profile.cert_ref].append(profile)
    return index


def index_virtuals_by_profile(virtuals: Iterable[VirtualServer]) -> Dict[ObjectPath, List[VirtualServer]]:
    index: Dict[ObjectPath, List[VirtualServer]] = defaultdict(list)
    for vs in virtuals:
        seen = set()
        for ref in vs.profiles or []:
            if ref.id in seen:
                continue
            seen.add(ref.id)
            index[ref.id].append(vs)
    return index


def cross_reference(
    certificates: Iterable[Certificate],
    profiles: Iterable[ClientSSLProfile],
    virtuals: Iterable[VirtualServer],
    expires_in_days: int,
    deep: bool,
    now: Optional[datetime] = None,
) -> List[CertificateMatch]:
    """
    One match per (certificate, profile) pair, or a single profile-less match for a
    certificate no profile uses. virtuals stays None unless deep mode found at least one.
    """
    by_cert = index_profiles_by_cert(profiles)
    by_profile = index_virtuals_by_profile(virtuals) if deep else {}

    matches: List[CertificateMatch] = []
    for cert in filter_expiring(certificates, expires_in_days, now):
        cert_profiles = by_cert.get(cert.id, [])
        if not cert_profiles:
            matches.append(CertificateMatch(certificate=cert))
            continue
        for profile in cert_profiles:
            used_by = by_profile.get(profile.id) if deep else None
            matches.append(CertificateMatch(
                certificate=cert,
                profile=profile,
                virtuals=list(used_by) if used_by else None,
                virtuals_checked=deep,
            ))
    return matches
