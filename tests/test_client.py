"""Tests for the authenticated custody API client."""

import hashlib

import httpx
import jwt
import pytest

from vaultsigner.client import CustodyClient, decode_response
from vaultsigner.contracts import (
    CreateVaultRequest,
    PeerPath,
    SigningRequest,
    TransactionOperation,
    TransactionStatus,
)
from vaultsigner.exceptions import DecodeError, TransportError

from tests.helpers import API_KEY, BASE_URL, VAULT_ADDRESS, CustodyStub


def bearer_claims(request: httpx.Request, rsa_key) -> dict:
    scheme, token = request.headers["Authorization"].split(" ", 1)
    assert scheme == "Bearer"
    return jwt.decode(
        token,
        rsa_key.public_key(),
        algorithms=["RS256"],
        options={"verify_exp": False, "verify_iat": False},
    )


def transfer_request() -> SigningRequest:
    return SigningRequest(
        asset_id="ETH_TEST3",
        operation=TransactionOperation.TRANSFER,
        source=PeerPath.vault_account("0"),
        destination=PeerPath.one_time("0xcbe74e21b070a979b9d6426b11e876d4cb618daf"),
        amount="0.01",
        note="test transfer",
    )


def client_for(handler, request_signer) -> CustodyClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return CustodyClient(request_signer, base_url=BASE_URL, http_client=http)


class TestAuthentication:
    """Tests that every call carries a fresh, body-bound token."""

    @pytest.mark.asyncio
    async def test_post_signs_exact_body(self, make_client, rsa_key):
        stub = CustodyStub(["COMPLETED"])
        client = make_client(stub)

        response = await client.create_transaction(transfer_request())

        assert response.id == "tx-1"
        assert response.status == TransactionStatus.SUBMITTED

        request = stub.requests[0]
        assert request.url.path == "/v1/transactions"
        assert request.headers["X-API-Key"] == API_KEY
        assert request.headers["Content-Type"] == "application/json"

        claims = bearer_claims(request, rsa_key)
        assert claims["uri"] == "/v1/transactions"
        assert claims["sub"] == API_KEY
        assert claims["bodyHash"] == hashlib.sha256(request.content).hexdigest()
        assert b'"operation":"TRANSFER"' in request.content

    @pytest.mark.asyncio
    async def test_get_signs_empty_body(self, make_client, rsa_key):
        stub = CustodyStub(["QUEUED"])
        client = make_client(stub)

        state = await client.get_transaction("tx-1")

        assert state.status == TransactionStatus.QUEUED
        request = stub.requests[0]
        assert request.content == b""
        claims = bearer_claims(request, rsa_key)
        assert claims["uri"] == "/v1/transactions/tx-1"
        assert claims["bodyHash"] == hashlib.sha256(b"null").hexdigest()

    @pytest.mark.asyncio
    async def test_each_call_gets_new_token(self, make_client):
        stub = CustodyStub(["QUEUED"])
        client = make_client(stub)

        await client.get_transaction("tx-1")
        await client.get_transaction("tx-1")

        first, second = (r.headers["Authorization"] for r in stub.requests)
        assert first != second


class TestErrors:
    """Tests for transport and decode failures."""

    @pytest.mark.asyncio
    async def test_http_error_status_raises_transport_error(self, request_signer):
        client = client_for(lambda request: httpx.Response(401, text="Unauthorized"), request_signer)

        with pytest.raises(TransportError) as exc_info:
            await client.get_transaction("tx-1")

        assert exc_info.value.status_code == 401
        assert exc_info.value.text == "Unauthorized"

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self, request_signer):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = client_for(handler, request_signer)

        with pytest.raises(TransportError):
            await client.create_transaction(transfer_request())

    @pytest.mark.asyncio
    async def test_unknown_status_raises_decode_error(self, request_signer):
        body = (
            '{"id": "tx-1", "assetId": "ETH", "status": "SOMETHING_NEW", '
            '"subStatus": "", "signedMessages": []}'
        )
        client = client_for(lambda request: httpx.Response(200, text=body), request_signer)

        with pytest.raises(DecodeError) as exc_info:
            await client.get_transaction("tx-1")

        assert exc_info.value.raw == body

    @pytest.mark.parametrize(
        "operation,peer_type",
        [("NOT_AN_OPERATION", "VAULT_ACCOUNT"), ("RAW", "NOT_A_PEER_TYPE")],
    )
    def test_unknown_operation_or_peer_type_raises_decode_error(self, operation, peer_type):
        body = (
            f'{{"assetId": "ETH", "operation": "{operation}", '
            f'"source": {{"type": "{peer_type}", "id": "0"}}}}'
        )

        with pytest.raises(DecodeError) as exc_info:
            decode_response(body, SigningRequest)

        assert exc_info.value.raw == body

    def test_known_operation_and_peer_type_decode(self):
        body = '{"assetId": "ETH", "operation": "RAW", "source": {"type": "VAULT_ACCOUNT", "id": "0"}}'
        request = decode_response(body, SigningRequest)
        assert request.operation == TransactionOperation.RAW
        assert request.source == PeerPath.vault_account("0")

    @pytest.mark.asyncio
    async def test_missing_field_is_not_default_filled(self, request_signer):
        body = '{"id": "tx-1", "assetId": "ETH", "status": "COMPLETED", "subStatus": ""}'
        client = client_for(lambda request: httpx.Response(200, text=body), request_signer)

        with pytest.raises(DecodeError):
            await client.get_transaction("tx-1")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self, request_signer):
        client = client_for(lambda request: httpx.Response(200, text="<html>"), request_signer)

        with pytest.raises(DecodeError) as exc_info:
            await client.vaults()

        assert exc_info.value.raw == "<html>"


class TestVaultEndpoints:
    """Tests for the pass-through vault endpoints."""

    @pytest.mark.asyncio
    async def test_vault_addresses(self, make_client):
        stub = CustodyStub(["QUEUED"])
        client = make_client(stub)

        addresses = await client.vault_addresses("0", "ETH_TEST3")

        assert len(addresses) == 1
        assert addresses[0].address == VAULT_ADDRESS
        assert addresses[0].kind == "Permanent"
        assert stub.requests[0].url.path == "/v1/vault/accounts/0/ETH_TEST3/addresses"

    @pytest.mark.asyncio
    async def test_vaults_page(self, request_signer):
        page = {
            "accounts": [{
                "id": "0",
                "name": "Default",
                "hiddenOnUI": False,
                "assets": [{"id": "ETH_TEST3", "total": "1.5", "available": "1.5"}],
                "autoFuel": False,
            }],
            "paging": {"after": "abc"},
        }
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json=page)

        client = client_for(handler, request_signer)
        result = await client.vaults()

        assert paths == ["/v1/vault/accounts_paged"]
        assert result.accounts[0].name == "Default"
        assert result.accounts[0].assets[0].total == "1.5"
        assert result.paging.after == "abc"
        assert result.next_url is None

    @pytest.mark.asyncio
    async def test_new_vault_body(self, request_signer):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200, json={"id": "7"})

        client = client_for(handler, request_signer)
        result = await client.new_vault(CreateVaultRequest(name="test-acc"))

        assert result.id == "7"
        assert bodies == [b'{"name":"test-acc","hiddenOnUI":false,"autoFuel":false}']


class TestClientLifecycle:

    @pytest.mark.asyncio
    async def test_from_settings(self, settings):
        client = CustodyClient.from_settings(settings)
        async with client:
            assert client.base_url == BASE_URL
            assert client.signer.api_key == API_KEY
            assert client.signer.expiry_seconds == 55
