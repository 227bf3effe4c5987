"""Shared fixtures."""

import pytest

from helpers import FALLBACK_ID, FakeHttp
from sc_resolver.auth import ClientIdAcquirer, TokenStore


@pytest.fixture
def fake_http() -> FakeHttp:
    """Create a scripted HTTP fake."""
    return FakeHttp()


@pytest.fixture
def anonymous_tokens(fake_http: FakeHttp) -> TokenStore:
    """Token store without credentials."""
    return TokenStore(fake_http)


@pytest.fixture
def client_ids(fake_http: FakeHttp) -> ClientIdAcquirer:
    """Client id acquirer with no configured id and a test fallback id."""
    return ClientIdAcquirer(fake_http, configured_id="", fallback_id=FALLBACK_ID)
