"""Authenticated HTTP client for the custody API.

Every call:
1. Serializes the body once to its wire bytes
2. Signs a fresh token over those bytes and the versioned path
3. Sends the same bytes with X-API-Key and Authorization headers
4. Decodes the response into a typed contract

Transport failures surface immediately; this client never retries.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from vaultsigner.auth import RequestSigner, load_private_key, serialize_body
from vaultsigner.config import SANDBOX_API_URL, Settings, get_settings
from vaultsigner.contracts import (
    CreateTransactionResponse,
    CreateVaultRequest,
    CreateVaultResponse,
    DepositAddress,
    SigningRequest,
    TransactionState,
    VaultAccount,
    VaultAccountsPage,
    VaultAsset,
)
from vaultsigner.exceptions import DecodeError, TransportError

logger = logging.getLogger(__name__)


class CustodyClient:
    """Custody REST API client.

    Docs: https://docs.fireblocks.com/api/#signing-a-request
    """

    def __init__(
        self,
        signer: RequestSigner,
        base_url: str = SANDBOX_API_URL,
        api_version: str = "v1",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize client.

        Args:
            signer: Request token signer
            base_url: API base URL
            api_version: Version path prefix
            timeout: HTTP timeout in seconds
            http_client: Optional preconfigured httpx client (owned by the caller)
        """
        self.signer = signer
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "CustodyClient":
        """Create a client from application settings.

        Raises:
            SigningError: If the RSA key file cannot be loaded
        """
        settings = settings or get_settings()
        signer = RequestSigner(
            load_private_key(settings.custody_api_secret_path),
            settings.custody_api_key,
            expiry_seconds=settings.jwt_expiry_seconds,
        )
        return cls(
            signer,
            base_url=settings.base_url,
            api_version=settings.api_version,
            timeout=settings.http_timeout,
            http_client=http_client,
        )

    async def __aenter__(self) -> "CustodyClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # --- Transactions ---

    async def create_transaction(self, request: SigningRequest) -> CreateTransactionResponse:
        return await self.post("transactions", request, CreateTransactionResponse)

    async def get_transaction(self, tx_id: str) -> TransactionState:
        return await self.get(f"transactions/{tx_id}", TransactionState)

    # --- Vault accounts ---

    async def vaults(self) -> VaultAccountsPage:
        return await self.get("vault/accounts_paged", VaultAccountsPage)

    async def vault(self, account_id: str) -> VaultAccount:
        return await self.get(f"vault/accounts/{account_id}", VaultAccount)

    async def vault_wallet(self, account_id: str, asset_id: str) -> VaultAsset:
        return await self.get(f"vault/accounts/{account_id}/{asset_id}", VaultAsset)

    async def vault_addresses(self, account_id: str, asset_id: str) -> list[DepositAddress]:
        return await self.get(
            f"vault/accounts/{account_id}/{asset_id}/addresses", list[DepositAddress]
        )

    async def new_vault(self, request: CreateVaultRequest) -> CreateVaultResponse:
        return await self.post("vault/accounts", request, CreateVaultResponse)

    # --- Authenticated GET/POST helpers ---

    async def get(self, path: str, model: Any) -> Any:
        return await self._send("GET", path, None, model)

    async def post(self, path: str, body: Any, model: Any) -> Any:
        return await self._send("POST", path, body, model)

    def _versioned(self, path: str) -> str:
        return f"/{self.api_version}/{path.lstrip('/')}"

    def _headers(self, uri: str, content: bytes) -> dict[str, str]:
        token = self.signer.sign(uri, content)
        return {
            "X-API-Key": self.signer.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, path: str, body: Any, model: Any) -> Any:
        uri = self._versioned(path)
        content = serialize_body(body)
        headers = self._headers(uri, content)

        try:
            response = await self._client.request(
                method,
                uri,
                headers=headers,
                content=content if method != "GET" else None,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Custody API {method} {uri} failed: {e}")
            raise TransportError(f"{method} {uri} failed: {e}") from e

        if response.is_error:
            logger.warning(f"Custody API {method} {uri} returned {response.status_code}")
            raise TransportError(
                f"{method} {uri} returned HTTP {response.status_code}",
                status_code=response.status_code,
                text=response.text,
            )

        return decode_response(response.text, model)


def decode_response(text: str, model: Any) -> Any:
    """Validate response text against a contract type.

    Raises:
        DecodeError: If the text does not match the contract, with the raw text attached
    """
    try:
        return TypeAdapter(model).validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"Deserialization error: {e}", raw=text) from e
