"""
Client configuration.
"""

import pytest

from tokenext_client.config import ENDPOINTS, ClientConfig
from tokenext_client.enums import Commitment


@pytest.mark.unit
class TestClientConfig:

    def test_network_names_resolve(self):
        assert ClientConfig("devnet").endpoint == ENDPOINTS["devnet"]
        assert ClientConfig("http://node:8899").endpoint == "http://node:8899"

    def test_commitment_from_string(self):
        assert ClientConfig("local", commitment="finalized").commitment == Commitment.FINALIZED

    def test_non_positive_timeout(self):
        with pytest.raises(ValueError):
            ClientConfig("local", timeout=0)

    def test_from_env(self):
        config = ClientConfig.from_env({
            "TOKENEXT_RPC_ENDPOINT": "mainnet",
            "TOKENEXT_COMMITMENT": "processed",
            "TOKENEXT_TIMEOUT": "5",
        })
        assert config.endpoint == ENDPOINTS["mainnet"]
        assert config.commitment == Commitment.PROCESSED
        assert config.timeout == 5.0

    def test_from_env_defaults(self):
        config = ClientConfig.from_env({})
        assert config.endpoint == ENDPOINTS["devnet"]
        assert config.commitment == Commitment.CONFIRMED

    def test_from_os_environ(self, monkeypatch):
        monkeypatch.setenv("TOKENEXT_RPC_ENDPOINT", "local")
        monkeypatch.delenv("TOKENEXT_COMMITMENT", raising=False)
        monkeypatch.delenv("TOKENEXT_TIMEOUT", raising=False)
        assert ClientConfig.from_env().endpoint == ENDPOINTS["local"]
