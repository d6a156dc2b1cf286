"""
JSON-RPC ledger client.

Implements the ledger client interface over HTTP JSON-RPC 2.0: funding
quotes, account reads, and atomic submission with confirmation polling.

Example:
    ```python
    client = JsonRpcLedgerClient(ClientConfig("devnet"))
    lamports = client.minimum_funding(234)
    data = client.read_account(mint_address)
    ```
"""

from __future__ import annotations
import base64
import json
import logging
import random
import time
from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from ..codec.transaction import (
    Instruction,
    PACKET_DATA_SIZE,
    compile_message,
    sign_message,
)
from ..config import ClientConfig
from ..enums import Commitment
from ..runtime.address import Address, b58encode
from ..runtime.errors import AccountNotFoundError, ErrorCode, NetworkError, SubmissionError
from .base import Confirmation, LedgerClient, resolve_fee_payer

logger = logging.getLogger(__name__)

_COMMITMENT_RANK = {
    Commitment.PROCESSED: 0,
    Commitment.CONFIRMED: 1,
    Commitment.FINALIZED: 2,
}


class RpcError(NetworkError):
    """Error object returned by the node."""

    def __init__(self, message: str, rpc_code: Optional[int] = None, data: Any = None):
        super().__init__(message, {"rpcCode": rpc_code} if rpc_code is not None else None)
        self.rpc_code = rpc_code
        self.data = data


class JsonRpcLedgerClient(LedgerClient):
    """
    Ledger client speaking JSON-RPC 2.0 over HTTP.
    """

    def __init__(
        self,
        config: Union[str, ClientConfig],
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint URL, network name, or a ClientConfig
            session: Optional requests.Session for connection pooling
        """
        if isinstance(config, str):
            self.config = ClientConfig(endpoint=config)
        else:
            self.config = config

        self.logger = logger
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

        self._session = session or requests.Session()
        self._owns_session = session is None
        self._session.headers.update({"User-Agent": self.config.user_agent})

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> JsonRpcLedgerClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Low-level RPC
    # =========================================================================

    def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a JSON-RPC 2.0 call.

        Raises:
            RpcError: If the node returns an error object
            NetworkError: If the HTTP exchange fails
        """
        request_data: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": random.randint(1, 1_000_000),
            "method": method,
        }
        if params is not None:
            request_data["params"] = params

        self.logger.debug(f"RPC {method}")
        try:
            response = self._session.post(
                self.config.endpoint,
                json=request_data,
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout,
            )
            if response.status_code != 200:
                raise NetworkError(
                    f"HTTP {response.status_code}: {response.reason}",
                    {"status": response.status_code},
                )
            response_data = response.json()
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"HTTP request failed: {e}", cause=e)
        except json.JSONDecodeError as e:
            raise NetworkError(f"Invalid JSON response: {e}", cause=e)

        if "error" in response_data:
            error = response_data["error"]
            raise RpcError(
                error.get("message", "Unknown error"),
                rpc_code=error.get("code"),
                data=error.get("data"),
            )
        return response_data.get("result")

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a raw JSON-RPC call."""
        return self._call(method, params)

    # =========================================================================
    # Queries
    # =========================================================================

    def minimum_funding(self, byte_size: int) -> int:
        result = self._call(
            "getMinimumBalanceForRentExemption",
            [byte_size, {"commitment": self.config.commitment.value}],
        )
        return int(result)

    def latest_blockhash(self) -> str:
        result = self._call("getLatestBlockhash", [{"commitment": self.config.commitment.value}])
        return result["value"]["blockhash"]

    def get_balance(self, address: Address) -> int:
        result = self._call("getBalance", [str(address), {"commitment": self.config.commitment.value}])
        return int(result["value"])

    def read_account(self, address: Address) -> bytes:
        result = self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.config.commitment.value}],
        )
        value = result.get("value") if result else None
        if value is None:
            raise AccountNotFoundError(f"Account {address} not found", {"address": str(address)})
        data, encoding = value["data"]
        if encoding != "base64":
            raise NetworkError(f"Unexpected account encoding: {encoding}")
        return base64.b64decode(data)

    def request_airdrop(self, address: Address, lamports: int) -> str:
        """Request test funds on networks that provide a faucet."""
        return self._call("requestAirdrop", [str(address), lamports])

    # =========================================================================
    # Submission
    # =========================================================================

    def submit_atomic(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence,
        fee_payer: Optional[Address] = None,
    ) -> Confirmation:
        payer = resolve_fee_payer(signers, fee_payer)
        try:
            message = compile_message(instructions, payer, self.latest_blockhash())
            transaction = sign_message(message, signers)
        except ValueError as e:
            raise SubmissionError(str(e), cause=e)

        wire = transaction.serialize()
        if len(wire) > PACKET_DATA_SIZE:
            raise SubmissionError(
                f"transaction is {len(wire)} bytes, limit is {PACKET_DATA_SIZE}",
                {"size": len(wire), "limit": PACKET_DATA_SIZE},
            )

        try:
            signature = self._call(
                "sendTransaction",
                [
                    base64.b64encode(wire).decode("ascii"),
                    {"encoding": "base64", "preflightCommitment": self.config.commitment.value},
                ],
            )
        except RpcError as e:
            self.logger.warning(f"Transaction rejected: {e.message}")
            raise SubmissionError(e.message, {"rpcCode": e.rpc_code, "data": e.data}, cause=e)
        except NetworkError as e:
            self.logger.warning(f"Transaction delivery failed: {e.message}")
            raise SubmissionError(e.message, dict(e.details), cause=e)

        self.logger.info(f"Submitted transaction {signature}")
        return self.confirm(signature or b58encode(transaction.signature))

    def confirm(self, signature: str) -> Confirmation:
        """
        Poll signature status until the configured commitment is reached.

        Raises:
            SubmissionError: If the transaction failed on the ledger, a status
                query failed, or it did not confirm in time
        """
        target = _COMMITMENT_RANK[self.config.commitment]
        deadline = time.monotonic() + self.config.confirm_timeout

        while time.monotonic() < deadline:
            try:
                result = self._call("getSignatureStatuses", [[signature], {"searchTransactionHistory": False}])
            except NetworkError as e:
                self.logger.warning(f"Status query for {signature} failed: {e.message}")
                raise SubmissionError(e.message, {"signature": signature, **e.details}, cause=e)
            status = (result or {}).get("value", [None])[0]
            if status is not None:
                if status.get("err") is not None:
                    reason = json.dumps(status["err"]) if not isinstance(status["err"], str) else status["err"]
                    self.logger.warning(f"Transaction {signature} failed: {reason}")
                    raise SubmissionError(reason, {"signature": signature})
                level = status.get("confirmationStatus")
                if level is not None and _COMMITMENT_RANK[Commitment(level)] >= target:
                    self.logger.info(f"Transaction {signature} reached {level}")
                    return Confirmation(signature, status.get("slot"), Commitment(level))
            time.sleep(self.config.poll_interval)

        raise SubmissionError(
            f"transaction {signature} not confirmed within {self.config.confirm_timeout} seconds",
            {"signature": signature},
            code=ErrorCode.TIMEOUT,
        )


def devnet_client(**kwargs) -> JsonRpcLedgerClient:
    return JsonRpcLedgerClient(ClientConfig("devnet", **kwargs))


def local_client(**kwargs) -> JsonRpcLedgerClient:
    return JsonRpcLedgerClient(ClientConfig("local", **kwargs))


def mainnet_client(**kwargs) -> JsonRpcLedgerClient:
    return JsonRpcLedgerClient(ClientConfig("mainnet", **kwargs))


__all__ = [
    "RpcError",
    "JsonRpcLedgerClient",
    "devnet_client",
    "local_client",
    "mainnet_client",
]
