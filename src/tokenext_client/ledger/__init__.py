"""
Ledger clients.

- base.py: the LedgerClient interface consumed by the composition engine
- rent.py: offline minimum-balance schedule
- rpc.py: JSON-RPC client over HTTP
- memory.py: deterministic in-process ledger
"""

from .base import Confirmation, LedgerClient
from .rent import RentSchedule
from .memory import InMemoryLedger
from .rpc import JsonRpcLedgerClient, RpcError, devnet_client, local_client, mainnet_client

__all__ = [
    "Confirmation",
    "LedgerClient",
    "RentSchedule",
    "InMemoryLedger",
    "JsonRpcLedgerClient",
    "RpcError",
    "devnet_client",
    "local_client",
    "mainnet_client",
]
