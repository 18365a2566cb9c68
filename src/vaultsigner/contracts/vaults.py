"""Vault account contracts.

Pass-through records for the listing and creation endpoints.
"""

from typing import Optional

from pydantic import Field

from vaultsigner.contracts.transactions import WireModel


class VaultAsset(WireModel):
    """Balance of one asset inside a vault account."""

    id: str
    total: str
    balance: Optional[str] = Field(None, description="Deprecated, use total")
    locked_amount: Optional[str] = Field(None, alias="lockedAmount")
    available: Optional[str] = None
    pending: Optional[str] = None


class VaultAccount(WireModel):
    id: str
    name: str
    hidden_on_ui: bool = Field(..., alias="hiddenOnUI")
    assets: list[VaultAsset]
    customer_ref_id: Optional[str] = Field(None, alias="customerRefId")
    auto_fuel: bool = Field(..., alias="autoFuel")


class Paging(WireModel):
    before: Optional[str] = None
    after: Optional[str] = None


class VaultAccountsPage(WireModel):
    """One page of vault accounts (GET /vault/accounts_paged)."""

    accounts: list[VaultAccount]
    paging: Paging
    previous_url: Optional[str] = Field(None, alias="previousUrl")
    next_url: Optional[str] = Field(None, alias="nextUrl")


class CreateVaultRequest(WireModel):
    name: str
    hidden_on_ui: bool = Field(default=False, alias="hiddenOnUI")
    customer_ref_id: Optional[str] = Field(None, alias="customerRefId")
    auto_fuel: bool = Field(default=False, alias="autoFuel")


class CreateVaultResponse(WireModel):
    id: str


class DepositAddress(WireModel):
    """Deposit address of a vault account asset."""

    asset_id: str = Field(..., alias="assetId")
    address: str
    tag: Optional[str] = None
    description: Optional[str] = None
    kind: str = Field(..., alias="type")
    legacy_address: Optional[str] = Field(None, alias="legacyAddress")
    customer_ref_id: Optional[str] = Field(None, alias="customerRefId")
    address_format: Optional[str] = Field(None, alias="addressFormat")
