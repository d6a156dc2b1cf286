"""
Client configuration.

Settings for talking to a ledger node, either built in code or read from
``TOKENEXT_*`` environment variables.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .enums import Commitment

ENDPOINTS = {
    "mainnet": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "local": "http://127.0.0.1:8899",
}

ENV_ENDPOINT = "TOKENEXT_RPC_ENDPOINT"
ENV_COMMITMENT = "TOKENEXT_COMMITMENT"
ENV_TIMEOUT = "TOKENEXT_TIMEOUT"


@dataclass
class ClientConfig:
    """Configuration for the JSON-RPC ledger client."""

    endpoint: str
    timeout: float = 30.0
    commitment: Commitment = Commitment.CONFIRMED
    confirm_timeout: float = 60.0
    poll_interval: float = 0.5
    debug: bool = False
    user_agent: str = "tokenext-python/0.3.0"

    def __post_init__(self):
        # Allow well-known network names in place of URLs
        self.endpoint = ENDPOINTS.get(self.endpoint, self.endpoint)
        if isinstance(self.commitment, str):
            self.commitment = Commitment(self.commitment)
        if self.timeout <= 0 or self.confirm_timeout <= 0 or self.poll_interval <= 0:
            raise ValueError("timeouts and poll interval must be positive")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, default: str = "devnet") -> ClientConfig:
        """
        Build a config from environment variables.

        Args:
            env: Mapping to read (defaults to ``os.environ``)
            default: Endpoint or network name when none is set
        """
        env = os.environ if env is None else env
        kwargs = {"endpoint": env.get(ENV_ENDPOINT, default)}
        if env.get(ENV_COMMITMENT):
            kwargs["commitment"] = Commitment(env[ENV_COMMITMENT])
        if env.get(ENV_TIMEOUT):
            kwargs["timeout"] = float(env[ENV_TIMEOUT])
        return cls(**kwargs)


__all__ = ["ClientConfig", "ENDPOINTS"]
