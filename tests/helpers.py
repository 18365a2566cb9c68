"""Shared test helpers: a scripted custody service."""

from typing import Optional

import httpx

BASE_URL = "https://custody.test"
API_KEY = "test-api-key"
VAULT_ADDRESS = "0x9d3a3a1a0b2c3d4e5f60718293a4b5c6d7e8f901"


def signed_message(r: str = "0x1", s: str = "0x2", v: int = 0) -> dict:
    """Signed message entry as returned by the service."""
    return {
        "content": "ab" * 32,
        "algorithm": "MPC_ECDSA_SECP256K1",
        "derivationPath": [44, 60, 0, 0, 0],
        "signature": {"fullSig": r.removeprefix("0x") + s.removeprefix("0x"), "r": r, "s": s, "v": v},
        "publicKey": "02" + "11" * 32,
    }


class CustodyStub:
    """Scripted custody service served through httpx.MockTransport.

    Each status poll returns the next scripted status; the last one repeats.
    """

    def __init__(
        self,
        statuses: list[str],
        signed_messages: Optional[list[dict]] = None,
        sub_status: str = "",
        tx_hash: Optional[str] = None,
        tx_id: str = "tx-1",
    ):
        self.statuses = statuses
        self.signed_messages = signed_messages if signed_messages is not None else [signed_message()]
        self.sub_status = sub_status
        self.tx_hash = tx_hash
        self.tx_id = tx_id
        self.requests: list[httpx.Request] = []
        self.polls = 0

    @property
    def created(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def transaction_state(self, status: str) -> dict:
        done = status in ("COMPLETED", "CONFIRMED")
        return {
            "id": self.tx_id,
            "assetId": "ETH_TEST3",
            "status": status,
            "subStatus": self.sub_status,
            "txHash": self.tx_hash if done else None,
            "signedMessages": self.signed_messages if done else [],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/v1/transactions":
            return httpx.Response(200, json={"id": self.tx_id, "status": "SUBMITTED"})

        if request.method == "GET" and path == f"/v1/transactions/{self.tx_id}":
            status = self.statuses[min(self.polls, len(self.statuses) - 1)]
            self.polls += 1
            return httpx.Response(200, json=self.transaction_state(status))

        if request.method == "GET" and path.endswith("/addresses"):
            return httpx.Response(200, json=[{
                "assetId": "ETH_TEST3",
                "address": VAULT_ADDRESS,
                "tag": "",
                "description": "",
                "type": "Permanent",
                "legacyAddress": "",
                "customerRefId": "",
                "addressFormat": None,
            }])

        return httpx.Response(404, json={"message": "Not found"})
