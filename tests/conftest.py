import pytest
from httpx import ASGITransport, AsyncClient

from mediatree import api
from mediatree.config import AuthOptions, RefreshPolicy, StorageBackend
from mediatree.connections import media_connections
from mediatree.namespace.cache import get_tree_cache
from tests.tools import API_KEY, media_settings


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def test_settings():
    """Point every test at a fake Cloudflare account, whatever the local .env says"""
    with media_settings(
        auth=AuthOptions.api_key,
        api_key=API_KEY,
        storage_backend=StorageBackend.cloudflare,
        refresh_policy=RefreshPolicy.per_request,
        cf_api_url="https://api.cloudflare.com/client/v4",
        cf_account_id="test-account",
        cf_api_token="test-token",
        cf_account_hash="test-hash",
        cf_delivery_url="https://imagedelivery.net",
        cf_page_size=1000,
        s3_host=None,
    ) as settings:
        yield settings


@pytest.fixture(autouse=True)
def tree_cache():
    get_tree_cache.cache_clear()
    yield get_tree_cache()
    get_tree_cache.cache_clear()


@pytest.fixture()
async def connections(test_settings):
    async with media_connections():
        yield


@pytest.fixture()
async def client(connections):
    async with AsyncClient(transport=ASGITransport(app=api.app), base_url="http://test", follow_redirects=False) as client:
        yield client
