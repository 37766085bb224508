# ltm_client/services/fetchers.py
"""
Read-only collection fetchers: certificates, client-ssl profiles and virtual servers.

Every fetch is a fresh snapshot. In deep mode each virtual server needs one extra
request for its attached profiles; those run on a bounded thread pool and each
result goes back into its own virtual's slot.

Profile cert/key/chain references are kept as the device returns them (full paths,
possibly with nested folders). The one normalization is a bare name without a
leading '/', which is qualified with the profile's own partition; current TMOS
versions always return full paths, so this only applies to older payloads.
"""
from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from ltm_client.core import config
from ltm_client.core.enums import Partition, ProfileType
from ltm_client.core.exceptions import TransportError
from ltm_client.core.logger import get_f5_logger
from ltm_client.schemas.ltm import (
    Certificate,
    ClientSSLProfile,
    ObjectPath,
    VirtualProfileRef,
    VirtualServer,
)
from ltm_client.services.session import LTMClient

logger = get_f5_logger()

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

CERTIFICATES_PATH = "/mgmt/tm/sys/file/ssl-cert"
CLIENT_SSL_PROFILES_PATH = f"/mgmt/tm/ltm/profile/{ProfileType.CLIENT_SSL.value}"
VIRTUALS_PATH = "/mgmt/tm/ltm/virtual"


@dataclass
class Inventory:
    certificates: List[Certificate]
    profiles: List[ClientSSLProfile]
    virtuals: List[VirtualServer]


def epoch_to_datetime(seconds) -> datetime:
    """expirationDate is seconds since 1970-01-01T00:00:00Z."""
    return EPOCH + timedelta(seconds=int(seconds))


def collection_items(body: dict) -> list:
    # Empty collections come back without an "items" key
    return body.get("items") or []


def _to_ref(value, partition: str) -> Optional[ObjectPath]:
    """Parse a cert/key/chain reference; 'none' and empty mean no reference."""
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == "none":
        return None
    if not value.startswith("/"):
        value = f"/{partition}/{value}"
    return ObjectPath.parse(value)


def _gather(futures: Sequence[Future]) -> list:
    """
    Wait for all futures and return their results in submission order.
    The first failure cancels whatever has not started yet and is re-raised.
    """
    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    for fut in done:
        if fut.exception() is not None:
            for other in pending:
                other.cancel()
            raise fut.exception()
    return [fut.result() for fut in futures]


# ----------------------------
# Certificates
# ----------------------------

def fetch_certificates(client: LTMClient) -> List[Certificate]:
    phase = "fetch certificates"
    body = client.get_json(CERTIFICATES_PATH, phase=phase)
    certs = []
    for item in collection_items(body):
        partition = item.get("partition", Partition.COMMON.value)
        name = item.get("name")
        raw_exp = item.get("expirationDate")
        if not name or raw_exp is None:
            raise TransportError(client.host, phase, f"certificate entry without name/expirationDate: {item.get('fullPath')}")
        certs.append(Certificate(
            name=name,
            partition=partition,
            sub_path=item.get("subPath"),
            subject=item.get("subject"),
            subject_alternative_name=item.get("subjectAlternativeName"),
            expiration_epoch=int(raw_exp),
            expiration=epoch_to_datetime(raw_exp),
        ))
    logger.info(f"Fetched {len(certs)} certificates from {client.host}")
    return certs


# ----------------------------
# Client-SSL profiles
# ----------------------------

def fetch_client_ssl_profiles(client: LTMClient) -> List[ClientSSLProfile]:
    body = client.get_json(CLIENT_SSL_PROFILES_PATH, phase="fetch client-ssl profiles")
    profiles = []
    for item in collection_items(body):
        partition = item.get("partition", Partition.COMMON.value)
        cert, key, chain = item.get("cert"), item.get("key"), item.get("chain")
        ckc = item.get("certKeyChain") or []
        try:
            if _to_ref(cert, partition) is None and ckc:
                # Newer versions keep the pair in certKeyChain; the first entry is the GUI's "default"
                first = dict(ckc[0])
                cert, key, chain = first.get("cert"), first.get("key"), first.get("chain")
            profiles.append(ClientSSLProfile(
                name=item["name"],
                partition=partition,
                sub_path=item.get("subPath"),
                cert_ref=_to_ref(cert, partition),
                key_ref=_to_ref(key, partition),
                chain_ref=_to_ref(chain, partition),
            ))
        except (KeyError, ValueError) as e:
            raise TransportError(
                client.host, "fetch client-ssl profiles", f"unreadable profile {item.get('fullPath')}: {e}"
            ) from e
    logger.info(f"Fetched {len(profiles)} client-ssl profiles from {client.host}")
    return profiles


# ----------------------------
# Virtual servers
# ----------------------------

def fetch_virtual_profiles(client: LTMClient, virtual: VirtualServer) -> List[VirtualProfileRef]:
    """Profiles attached to one virtual, read from its profilesReference link."""
    if not virtual.profiles_link:
        return []
    body = client.get_json(
        client.resolve_link(virtual.profiles_link),
        phase=f"fetch virtual profiles {virtual.id}",
    )
    refs = []
    for item in collection_items(body):
        refs.append(VirtualProfileRef(
            name=item["name"],
            partition=item.get("partition", virtual.partition),
            sub_path=item.get("subPath"),
            context=item.get("context"),
        ))
    return refs


def fetch_virtuals(client: LTMClient, deep: bool = False, max_workers: Optional[int] = None) -> List[VirtualServer]:
    body = client.get_json(VIRTUALS_PATH, phase="fetch virtual servers")
    virtuals = []
    for item in collection_items(body):
        virtuals.append(VirtualServer(
            name=item["name"],
            partition=item.get("partition", Partition.COMMON.value),
            sub_path=item.get("subPath"),
            description=item.get("description"),
            profiles_link=(item.get("profilesReference") or {}).get("link"),
        ))
    logger.info(f"Fetched {len(virtuals)} virtual servers from {client.host}")

    if not deep or not virtuals:
        return virtuals

    workers = max(1, min(max_workers or config.F5_MAX_WORKERS, len(virtuals)))
    logger.info(f"Fetching attached profiles for {len(virtuals)} virtual servers ({workers} workers)")
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ltm-virtual") as pool:
        futures = [pool.submit(fetch_virtual_profiles, client, vs) for vs in virtuals]
        profile_lists = _gather(futures)

    return [vs.model_copy(update={"profiles": profs}) for vs, profs in zip(virtuals, profile_lists)]


def fetch_inventory(client: LTMClient, deep: bool = False, max_workers: Optional[int] = None) -> Inventory:
    """Run the three independent collection fetches concurrently and join them."""
    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="ltm-fetch") as pool:
        futures = [
            pool.submit(fetch_certificates, client),
            pool.submit(fetch_client_ssl_profiles, client),
            pool.submit(fetch_virtuals, client, deep, max_workers),
        ]
        certificates, profiles, virtuals = _gather(futures)
    return Inventory(certificates=certificates, profiles=profiles, virtuals=virtuals)
