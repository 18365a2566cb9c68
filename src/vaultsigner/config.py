"""Application configuration using pydantic-settings.

Holds the custody API credentials, the polling policy for transaction
lifecycles and the vault account used for signing.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SANDBOX_API_URL = "https://sandbox-api.fireblocks.io"

# Chain ID -> custody asset ID for the EVM networks the signer supports
CHAIN_ASSETS = {
    1: "ETH",
    3: "ETH_TEST",
    5: "ETH_TEST3",
    42: "ETH_TEST2",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Custody API
    # ======================
    custody_api_key: str = Field(default="", description="API key issued by the custody service")
    custody_api_secret_path: str = Field(
        default="~/.vaultsigner/api.key",
        description="Path to the RSA private key (PEM) used to sign request tokens",
    )
    custody_api_url: str = Field(default=SANDBOX_API_URL, description="Custody API base URL")
    api_version: str = Field(default="v1", description="API version path prefix")
    jwt_expiry_seconds: int = Field(
        default=55, description="Lifetime of each request token in seconds"
    )
    http_timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")

    # ======================
    # Signing account
    # ======================
    vault_account_id: str = Field(default="0", description="Vault account used as signing source")
    chain_id: int = Field(default=5, description="EVM chain ID for chain-bound signatures")

    # ======================
    # Transaction polling
    # ======================
    poll_interval: float = Field(
        default=1.0, description="Seconds to wait between transaction status polls"
    )
    transaction_timeout_ms: int = Field(
        default=60_000, description="Give up waiting for a transaction after this many ms"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def base_url(self) -> str:
        """API base URL without a trailing slash."""
        return self.custody_api_url.rstrip("/")

    def get_asset_id(self, chain_id: Optional[int] = None) -> str:
        """Get the custody asset ID for a chain.

        Args:
            chain_id: EVM chain ID (defaults to the configured chain)

        Returns:
            Asset ID understood by the custody service

        Raises:
            ValueError: If the chain is not supported
        """
        chain = self.chain_id if chain_id is None else chain_id
        try:
            return CHAIN_ASSETS[chain]
        except KeyError:
            raise ValueError(f"Unsupported chain_id: {chain}") from None

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "custody_api_url": self.custody_api_url,
            "api_version": self.api_version,
            "custody_api_key": "***" if self.custody_api_key else "(not set)",
            "custody_api_secret_path": self.custody_api_secret_path,
            "vault_account_id": self.vault_account_id,
            "chain_id": self.chain_id,
            "polling": {
                "interval": self.poll_interval,
                "timeout_ms": self.transaction_timeout_ms,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
