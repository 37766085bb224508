import pytest

from ltm_client.services.fetchers import CERTIFICATES_PATH, CLIENT_SSL_PROFILES_PATH, VIRTUALS_PATH
from ltm_client.services.session import LTMClient

from helpers import (
    FakeClock,
    FakeHttp,
    FakeResponse,
    attached_profiles,
    cert_item,
    collection,
    profile_item,
    virtual_item,
    virtual_profiles_path,
)


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(http, clock):
    return LTMClient("bigip.example.net", "admin", "secret", verify=False, timeout=10, http=http, clock=clock)


@pytest.fixture
def site_device(http):
    """
    One certificate /P1/site.com expiring in 10 days, used by /P1/site.com-profile,
    which is attached to /P1/vs1.
    """
    http.routes.update({
        ("GET", CERTIFICATES_PATH): FakeResponse(200, collection(cert_item("site.com", 10, partition="P1"))),
        ("GET", CLIENT_SSL_PROFILES_PATH): FakeResponse(200, collection(
            profile_item("site.com-profile", "/P1/site.com", partition="P1"),
        )),
        ("GET", VIRTUALS_PATH): FakeResponse(200, collection(
            virtual_item("vs1", partition="P1", description="public site"),
        )),
        ("GET", virtual_profiles_path("vs1", "P1")): FakeResponse(200, attached_profiles(
            "/Common/http", "/P1/site.com-profile",
        )),
    })
    return http
