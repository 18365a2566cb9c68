"""Pytest configuration and fixtures."""

import os

import httpx
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["CUSTODY_API_KEY"] = "test-api-key"
os.environ["DEBUG"] = "true"

from vaultsigner.auth import RequestSigner
from vaultsigner.client import CustodyClient
from vaultsigner.config import Settings

from tests.helpers import API_KEY, BASE_URL, CustodyStub


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """RSA key used to sign request tokens in tests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key) -> bytes:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def request_signer(rsa_key) -> RequestSigner:
    return RequestSigner(rsa_key, API_KEY)


@pytest.fixture
def settings(tmp_path, rsa_pem) -> Settings:
    """Settings pointing at the test key and stub service."""
    key_file = tmp_path / "api.key"
    key_file.write_bytes(rsa_pem)
    return Settings(
        custody_api_key=API_KEY,
        custody_api_secret_path=str(key_file),
        custody_api_url=BASE_URL,
        vault_account_id="0",
        chain_id=5,
        poll_interval=0,
        transaction_timeout_ms=5_000,
    )


@pytest_asyncio.fixture
async def make_client(request_signer):
    """Factory for clients wired to a CustodyStub."""
    http_clients: list[httpx.AsyncClient] = []

    def factory(stub: CustodyStub) -> CustodyClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(stub.handler), base_url=BASE_URL)
        http_clients.append(http)
        return CustodyClient(request_signer, base_url=BASE_URL, http_client=http)

    yield factory

    for http in http_clients:
        await http.aclose()
