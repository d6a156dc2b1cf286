"""
Shared fixtures: deterministic keypairs, a funded in-memory ledger and a
builder bound to it.
"""
import logging

import pytest

from tokenext_client.composer import CompositionBuilder
from tokenext_client.ledger import InMemoryLedger

from helpers.factories import LAMPORTS_PER_SOL, mk_keypair


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="tokenext_client")
    yield


@pytest.fixture
def payer():
    """Fee payer keypair; also the default mint authority."""
    return mk_keypair("payer")


@pytest.fixture
def authority():
    """A second authority distinct from the payer."""
    return mk_keypair("authority")


@pytest.fixture
def ledger(payer, authority):
    ledger = InMemoryLedger()
    ledger.airdrop(payer.address, 10 * LAMPORTS_PER_SOL)
    ledger.airdrop(authority.address, LAMPORTS_PER_SOL)
    return ledger


@pytest.fixture
def builder(ledger):
    return CompositionBuilder(ledger=ledger)
