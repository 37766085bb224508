"""
Test doubles for the iControl REST API
"""
import json
import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from urllib.parse import urlsplit

from ltm_client.services.session import LOGIN_PATH

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


class FakeResponse:
    """Just enough of requests.Response for LTMClient."""

    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json


class FakeHttp:
    """
    Stand-in for requests.Session. Routes are keyed by (method, path); a route is a
    FakeResponse, an exception instance to raise, or a callable(method, url, kwargs).
    Logins are answered automatically with token-1, token-2, ... unless routed.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.logins = 0
        self.closed = False
        self._lock = threading.Lock()

    def request(self, method, url, **kwargs):
        parts = urlsplit(url)
        with self._lock:
            self.calls.append(SimpleNamespace(
                method=method, url=url, host=parts.netloc, path=parts.path, query=parts.query, kwargs=kwargs,
            ))
        key = (method, parts.path)
        if key not in self.routes and key == ("POST", LOGIN_PATH):
            with self._lock:
                self.logins += 1
                n = self.logins
            return FakeResponse(200, {"token": {"token": f"token-{n}", "startTime": "2026-10-17T12:00:00Z"}})
        handler = self.routes.get(key)
        if handler is None:
            return FakeResponse(404, {"code": 404, "message": f"Object not found: {parts.path}"})
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(method, url, kwargs)
        return handler

    def calls_to(self, path, method=None):
        return [c for c in self.calls if c.path == path and (method is None or c.method == method)]

    def close(self):
        self.closed = True


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, minutes=0, seconds=0):
        self.now += minutes * 60 + seconds


# ----------------------------
# Device data builders
# ----------------------------

def cert_item(name, days, partition="Common", subject=None, san=None, now=NOW):
    expires = now + timedelta(days=days)
    return {
        "kind": "tm:sys:file:ssl-cert:ssl-certstate",
        "name": name,
        "partition": partition,
        "fullPath": f"/{partition}/{name}",
        "subject": subject or f"CN={name}",
        "subjectAlternativeName": san,
        "expirationDate": int(expires.timestamp()),
    }


def profile_item(name, cert, partition="Common", key=None, chain="none"):
    return {
        "kind": "tm:ltm:profile:client-ssl:client-sslstate",
        "name": name,
        "partition": partition,
        "fullPath": f"/{partition}/{name}",
        "cert": cert,
        "key": key or cert,
        "chain": chain,
    }


def virtual_profiles_path(name, partition="Common"):
    return f"/mgmt/tm/ltm/virtual/~{partition}~{name}/profiles"


def virtual_item(name, partition="Common", description=None):
    return {
        "kind": "tm:ltm:virtual:virtualstate",
        "name": name,
        "partition": partition,
        "fullPath": f"/{partition}/{name}",
        "description": description,
        "profilesReference": {
            "link": f"https://localhost{virtual_profiles_path(name, partition)}?ver=16.1.0",
            "isSubcollection": True,
        },
    }


def attached_profiles(*full_paths):
    items = []
    for fp in full_paths:
        _, partition, name = fp.split("/")
        items.append({"name": name, "partition": partition, "fullPath": fp, "context": "clientside"})
    return {"items": items}


def collection(*items):
    return {"kind": "collectionstate", "items": list(items)}
