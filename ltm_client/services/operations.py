# ltm_client/services/operations.py
"""
One-call wrappers over the iControl REST API: file upload, key/cert install,
client-ssl profile create/update, bash, and plain pool/node/virtual listings.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from ltm_client.core import config
from ltm_client.core.enums import Partition
from ltm_client.core.exceptions import ConfigurationError
from ltm_client.core.logger import get_service_logger
from ltm_client.schemas.ltm import ObjectPath
from ltm_client.services.fetchers import CLIENT_SSL_PROFILES_PATH, VIRTUALS_PATH, collection_items
from ltm_client.services.session import LTMClient

logger = get_service_logger()

UPLOAD_PATH = "/mgmt/shared/file-transfer/bulk/uploads"
UPLOAD_TARGET_DIR = "/var/config/rest/bulk"
CRYPTO_KEY_PATH = "/mgmt/tm/sys/crypto/key"
CRYPTO_CERT_PATH = "/mgmt/tm/sys/crypto/cert"
BASH_PATH = "/mgmt/tm/util/bash"
POOLS_PATH = "/mgmt/tm/ltm/pool"
NODES_PATH = "/mgmt/tm/ltm/node"

UPLOAD_CHUNK = 1024 * 1024  # 1 MiB


# ----------------------------
# PEM helpers
# ----------------------------

def _sanitize_pem_cert(cert_pem: str) -> str:
    """Re-serialize the certificate to a canonical PEM."""
    cert = x509.load_pem_x509_certificate(cert_pem.encode('utf-8'))
    return cert.public_bytes(serialization.Encoding.PEM).decode('utf-8')


def _get_not_after_dt(cert_obj) -> datetime:
    try:
        return cert_obj.not_valid_after_utc  # cryptography >= 42
    except AttributeError:
        return cert_obj.not_valid_after


def derive_object_name_from_pem(cert_pem: str) -> str:
    """
    Given a PEM certificate, derive a safe F5 object name: <safe_cn>_<not_after>
    """
    cert_obj = x509.load_pem_x509_certificate(cert_pem.encode("utf-8"))
    cn_attrs = cert_obj.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not cn_attrs:
        raise ConfigurationError("name", "certificate has no Common Name; pass an object name explicitly")
    not_after = _get_not_after_dt(cert_obj).date().isoformat()
    safe_cn = cn_attrs[0].value.replace("*.", "star_").replace(".", "_")
    return f"{safe_cn}_{not_after}"


def _read_source(source_path) -> bytes:
    if not source_path or not str(source_path).strip():
        raise ConfigurationError("source_path", "must not be empty")
    path = Path(source_path)
    if not path.is_file():
        raise ConfigurationError("source_path", f"file not found: {path}")
    return path.read_bytes()


# ----------------------------
# Upload + install
# ----------------------------

def upload_bytes(client: LTMClient, data: bytes, remote_filename: str) -> str:
    """
    Upload bytes through file-transfer (chunked, Content-Range start-end/total with end inclusive).
    Returns the path the device stored the file at.
    """
    if not remote_filename:
        raise ConfigurationError("remote_filename", "must not be empty")
    size = len(data)
    if size == 0:
        raise ConfigurationError("data", "nothing to upload")

    uri = f"{UPLOAD_PATH}/{remote_filename}"
    start = 0
    while start < size:
        end = min(start + UPLOAD_CHUNK, size)
        headers = {
            'Content-Type': 'application/octet-stream',
            'Content-Range': f"{start}-{end - 1}/{size}",
        }
        client.request("POST", uri, headers=headers, data=data[start:end], phase=f"upload {remote_filename}")
        start = end
    logger.info(f"Uploaded {remote_filename} ({size} bytes) to {client.host}")
    return f"{UPLOAD_TARGET_DIR}/{remote_filename}"


def upload_file(client: LTMClient, source_path, remote_filename: Optional[str] = None) -> str:
    data = _read_source(source_path)
    return upload_bytes(client, data, remote_filename or Path(source_path).name)


def _install(client: LTMClient, uri: str, kind: str, name: str, local_file: str) -> dict:
    if not name:
        raise ConfigurationError("name", "must not be empty")
    if not local_file:
        raise ConfigurationError("local_file", "must not be empty")
    payload = {"command": "install", "name": name, "from-local-file": local_file}
    body = client.request_json("POST", uri, json=payload, phase=f"install {kind} {name}")
    logger.info(f"Installed {kind} '{name}' on {client.host} from {local_file}")
    return body


def install_key(client: LTMClient, name: str, local_file: str) -> dict:
    return _install(client, CRYPTO_KEY_PATH, "key", name, local_file)


def install_certificate(client: LTMClient, name: str, local_file: str) -> dict:
    return _install(client, CRYPTO_CERT_PATH, "cert", name, local_file)


def upload_certificate_and_key(
    client: LTMClient,
    cert_path,
    key_path,
    name: Optional[str] = None,
    partition: str = Partition.COMMON.value,
) -> dict:
    """Upload a PEM cert/key pair and install both under one object name (profiles untouched)."""
    cert_clean = _sanitize_pem_cert(_read_source(cert_path).decode("utf-8"))
    key_bytes = _read_source(key_path)
    object_name = name or derive_object_name_from_pem(cert_clean)

    cert_local = upload_bytes(client, cert_clean.encode("utf-8"), f"{object_name}.crt")
    key_local = upload_bytes(client, key_bytes, f"{object_name}.key")

    full_name = str(ObjectPath(partition=partition, name=object_name))
    install_key(client, full_name, key_local)
    install_certificate(client, full_name, cert_local)
    return {"object_name": object_name, "cert": full_name, "key": full_name}


# ----------------------------
# Client-SSL profiles
# ----------------------------

def create_client_ssl_profile(
    client: LTMClient,
    name: str,
    cert: str,
    key: str,
    chain: Optional[str] = None,
    defaults_from: Optional[str] = None,
    partition: str = Partition.COMMON.value,
) -> dict:
    if not cert or not key:
        raise ConfigurationError("cert/key", "a client-ssl profile needs both a certificate and a key")
    payload = {
        "name": name,
        "partition": partition,
        "defaultsFrom": defaults_from or config.DEFAULT_CLIENT_SSL_PARENT,
        "cert": cert,
        "key": key,
        "chain": chain or "none",
    }
    body = client.request_json("POST", CLIENT_SSL_PROFILES_PATH, json=payload, phase=f"create client-ssl profile {name}")
    logger.info(f"Created client-ssl profile /{partition}/{name} on {client.host}")
    return body


def update_client_ssl_profile(
    client: LTMClient,
    name: str,
    cert: Optional[str] = None,
    key: Optional[str] = None,
    chain: Optional[str] = None,
    partition: str = Partition.COMMON.value,
) -> dict:
    """
    Point an existing profile at a new cert/key/chain. Fields left as None keep the
    value currently configured on the profile.
    """
    profile_uri = f"{CLIENT_SSL_PROFILES_PATH}/{ObjectPath(partition=partition, name=name).uri_name}"
    current = client.get_json(profile_uri, phase=f"read client-ssl profile {name}")
    ckc = current.get("certKeyChain") or [{}]
    first = dict(ckc[0])

    payload = {
        "cert": cert or current.get("cert") or first.get("cert"),
        "key": key or current.get("key") or first.get("key"),
        "chain": chain or current.get("chain") or first.get("chain") or "none",
    }
    body = client.request_json("PATCH", profile_uri, json=payload, phase=f"update client-ssl profile {name}")
    logger.info(f"Updated client-ssl profile /{partition}/{name} on {client.host}: {payload}")
    return body


# ----------------------------
# bash + listings
# ----------------------------

def run_bash(client: LTMClient, cmd: str) -> str:
    if not cmd or not cmd.strip():
        raise ConfigurationError("cmd", "must not be empty")
    quoted = cmd.replace("'", "'\\''")
    payload = {"command": "run", "utilCmdArgs": f"-c '{quoted}'"}
    body = client.request_json("POST", BASH_PATH, json=payload, phase="run bash")
    return body.get('commandResult', '')


def list_pools(client: LTMClient) -> List[dict]:
    return collection_items(client.get_json(POOLS_PATH, phase="list pools"))


def list_nodes(client: LTMClient) -> List[dict]:
    return collection_items(client.get_json(NODES_PATH, phase="list nodes"))


def list_virtuals(client: LTMClient) -> List[dict]:
    return collection_items(client.get_json(VIRTUALS_PATH, phase="list virtual servers"))
