"""
Session client tests: login, lazy renewal, signed calls and error mapping
"""
import threading
import time

import pytest
import requests

from ltm_client.core.exceptions import AuthenticationError, ConfigurationError, TransportError
from ltm_client.services.session import AUTH_HEADER, LOGIN_PATH, LTMClient

from helpers import FakeHttp, FakeResponse

POOLS = "/mgmt/tm/ltm/pool"


class TestLogin:

    def test_login_payload_and_token_header(self, client, http):
        http.routes[("GET", POOLS)] = FakeResponse(200, {"items": []})

        client.get_json(POOLS)

        login = http.calls_to(LOGIN_PATH, "POST")[0]
        assert login.url == "https://bigip.example.net/mgmt/shared/authn/login"
        assert login.kwargs["json"] == {
            "username": "admin",
            "password": "secret",
            "loginProviderName": "tmos",
        }
        call = http.calls_to(POOLS, "GET")[0]
        assert call.kwargs["headers"][AUTH_HEADER] == "token-1"
        assert call.kwargs["verify"] is False
        assert call.kwargs["timeout"] == 10

    def test_login_401_raises_authentication_error(self, client, http):
        http.routes[("POST", LOGIN_PATH)] = FakeResponse(401, {"code": 401, "message": "Authentication failed."})

        with pytest.raises(AuthenticationError) as exc_info:
            client.ensure_session()

        assert exc_info.value.phase == "authentication"
        assert "bigip.example.net" in exc_info.value.message

    def test_login_without_token_is_rejected(self, client, http):
        http.routes[("POST", LOGIN_PATH)] = FakeResponse(200, {"username": "admin"})

        with pytest.raises(AuthenticationError, match="no token"):
            client.ensure_session()

    def test_login_network_failure_is_transport_error(self, client, http):
        http.routes[("POST", LOGIN_PATH)] = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(TransportError, match="connection refused") as exc_info:
            client.ensure_session()

        assert exc_info.value.phase == "authentication"

    def test_empty_credentials_fail_before_any_call(self):
        http = FakeHttp()

        with pytest.raises(ConfigurationError):
            LTMClient("bigip.example.net", "admin", "", http=http)
        with pytest.raises(ConfigurationError):
            LTMClient("  ", "admin", "secret", http=http)

        assert http.calls == []


class TestRenewal:

    def test_session_reused_within_margin(self, client, http, clock):
        first = client.ensure_session()
        clock.advance(minutes=5)

        second = client.ensure_session()

        assert second is first
        assert http.logins == 1

    def test_session_renewed_past_margin(self, client, http, clock):
        http.routes[("GET", POOLS)] = FakeResponse(200, {"items": []})
        client.ensure_session()
        clock.advance(minutes=19)

        client.get_json(POOLS)

        assert http.logins == 2
        # login happens before the call, and the call carries the new token
        assert [c.path for c in http.calls] == [LOGIN_PATH, LOGIN_PATH, POOLS]
        assert http.calls[-1].kwargs["headers"][AUTH_HEADER] == "token-2"

    def test_session_renewed_at_exact_margin(self, client, http, clock):
        client.ensure_session()
        clock.advance(minutes=18)

        assert client.ensure_session().token == "token-2"

    def test_concurrent_callers_log_in_once(self, clock):
        def slow_login(method, url, kwargs):
            time.sleep(0.05)
            return FakeResponse(200, {"token": {"token": "only-token"}})

        http = FakeHttp({("POST", LOGIN_PATH): slow_login})
        client = LTMClient("bigip.example.net", "admin", "secret", http=http, clock=clock)
        barrier = threading.Barrier(8)
        tokens = []

        def worker():
            barrier.wait()
            tokens.append(client.ensure_session().token)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(http.calls_to(LOGIN_PATH)) == 1
        assert tokens == ["only-token"] * 8


class TestRequests:

    def test_call_401_raises_authentication_error_with_phase(self, client, http):
        http.routes[("GET", POOLS)] = FakeResponse(401, {"code": 401, "message": "Unauthorized"})

        with pytest.raises(AuthenticationError) as exc_info:
            client.get_json(POOLS, phase="list pools")

        assert exc_info.value.phase == "list pools"

    def test_non_2xx_raises_transport_error(self, client, http):
        http.routes[("GET", POOLS)] = FakeResponse(500, text="internal error")

        with pytest.raises(TransportError) as exc_info:
            client.get_json(POOLS, phase="list pools")

        err = exc_info.value
        assert err.status_code == 500
        assert "internal error" in err.message
        assert err.to_dict() == {
            "error": "F5_TRANSPORT_ERROR",
            "message": err.message,
            "phase": "list pools",
            "status_code": 500,
        }

    def test_network_failure_raises_transport_error(self, client, http):
        http.routes[("GET", POOLS)] = requests.exceptions.SSLError("certificate verify failed")

        with pytest.raises(TransportError, match="certificate verify failed"):
            client.get_json(POOLS)

    def test_malformed_json_raises_transport_error(self, client, http):
        http.routes[("GET", POOLS)] = FakeResponse(200, text="<html>maintenance</html>")

        with pytest.raises(TransportError, match="malformed JSON"):
            client.get_json(POOLS)

    def test_no_retry_after_failure(self, client, http):
        http.routes[("GET", POOLS)] = FakeResponse(503, text="busy")

        with pytest.raises(TransportError):
            client.get_json(POOLS)

        assert len(http.calls_to(POOLS)) == 1

    def test_extra_headers_are_merged(self, client, http):
        http.routes[("POST", POOLS)] = FakeResponse(200, {})

        client.request("POST", POOLS, headers={"Content-Type": "application/json"}, json={"name": "p1"})

        headers = http.calls_to(POOLS)[0].kwargs["headers"]
        assert headers == {AUTH_HEADER: "token-1", "Content-Type": "application/json"}


class TestLinks:

    def test_resolve_link_strips_loopback_host(self, client):
        link = "https://localhost/mgmt/tm/ltm/virtual/~Common~vs1/profiles?ver=16.1.0"

        assert client.resolve_link(link) == "/mgmt/tm/ltm/virtual/~Common~vs1/profiles?ver=16.1.0"

    def test_links_are_requested_on_the_real_host(self, client, http):
        path = "/mgmt/tm/ltm/virtual/~Common~vs1/profiles"
        http.routes[("GET", path)] = FakeResponse(200, {"items": []})

        client.get_json(f"https://localhost{path}?ver=16.1.0")

        call = http.calls_to(path)[0]
        assert call.host == "bigip.example.net"
        assert call.query == "ver=16.1.0"

    def test_context_manager_closes_http(self, http, clock):
        with LTMClient("bigip.example.net", "admin", "secret", http=http, clock=clock):
            pass

        assert http.closed is True
