import pytest

from hookdeck_pubsub.models import VerificationConfig
from tests.fakes import FakeHookdeck, RecordingTransport


@pytest.fixture
def backend():
    return FakeHookdeck()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def api_key_auth():
    return VerificationConfig.api_key("some-api-key", header_key="some-header-key")


@pytest.fixture
def basic_auth():
    return VerificationConfig.basic_auth("username", "password")
