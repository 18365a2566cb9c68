"""Command-line entry point for custody operations.

Usage:
    vaultsigner vaults
    vaultsigner addresses 0 ETH_TEST3
    vaultsigner status <tx-id>
    vaultsigner sign-message "hello"

Environment variables:
    CUSTODY_API_KEY: API key issued by the custody service
    CUSTODY_API_SECRET_PATH: Path to the RSA private key (PEM)
    CUSTODY_API_URL: API base URL (default: sandbox)
    VAULT_ACCOUNT_ID: Vault account used for signing (default: 0)
    CHAIN_ID: EVM chain ID (default: 5)
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from pydantic import TypeAdapter

from vaultsigner.client import CustodyClient
from vaultsigner.config import get_settings
from vaultsigner.contracts import DepositAddress
from vaultsigner.exceptions import VaultSignerError
from vaultsigner.signing.remote import RemoteSigner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vaultsigner", description="Custody signing client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("vaults", help="List vault accounts")

    addresses = commands.add_parser("addresses", help="List deposit addresses of a vault asset")
    addresses.add_argument("account_id")
    addresses.add_argument("asset_id")

    status = commands.add_parser("status", help="Show transaction details")
    status.add_argument("tx_id")

    sign = commands.add_parser("sign-message", help="Sign a message with the configured vault")
    sign.add_argument("message")
    sign.add_argument("--timeout-ms", type=int, default=None, help="Approval timeout")

    return parser


async def run_command(args: argparse.Namespace) -> str:
    """Run one command and return its JSON output."""
    settings = get_settings()

    async with CustodyClient.from_settings(settings) as client:
        if args.command == "vaults":
            page = await client.vaults()
            return page.model_dump_json(by_alias=True, indent=2)

        if args.command == "addresses":
            addresses = await client.vault_addresses(args.account_id, args.asset_id)
            return TypeAdapter(list[DepositAddress]).dump_json(
                addresses, by_alias=True, indent=2
            ).decode()

        if args.command == "status":
            state = await client.get_transaction(args.tx_id)
            return state.model_dump_json(by_alias=True, indent=2)

        if args.command == "sign-message":
            signer = await RemoteSigner.connect(client, settings)
            if args.timeout_ms is not None:
                signer.set_timeout(args.timeout_ms)
            signature = await signer.sign_message(args.message)
            return json.dumps(
                {
                    "address": signer.address,
                    "r": hex(signature.r),
                    "s": hex(signature.s),
                    "v": signature.v,
                    "signature": signature.to_hex(),
                },
                indent=2,
            )

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose or get_settings().debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        output = asyncio.run(run_command(args))
    except (VaultSignerError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
