"""
Token extension Python SDK

Composes token-2022 mints carrying several extensions at once: checks the
requested combination, sizes and funds the account, orders the
initialization instructions, and submits the creation bundle atomically.
Post-creation feature wrappers operate on existing mints.
"""

from .enums import *
from .models import *
from .runtime.errors import *
from .runtime.address import Address, SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID, SYSVAR_RENT_ID
from .crypto import Keypair
from .config import ClientConfig, ENDPOINTS

from .composer import (
    AccountLayout,
    CompatibilityReport,
    CompatibilityRule,
    CompositionBuilder,
    CompositionPlan,
    ExecutionResult,
    InitializationPlan,
    InitStep,
    RULE_TABLE,
    calculate_fee,
    check,
    compute_layout,
    resolve,
)
from .ledger import (
    Confirmation,
    InMemoryLedger,
    JsonRpcLedgerClient,
    LedgerClient,
    RentSchedule,
    devnet_client,
    local_client,
    mainnet_client,
)
from .features import (
    ConfidentialBalancesFeature,
    DefaultAccountStateFeature,
    InterestBearingFeature,
    Mint,
    MintCloseFeature,
    PermanentDelegateFeature,
    TokenMetadataFeature,
    TransferFeeFeature,
    TransferHookFeature,
    submit,
)

__version__ = "0.3.0"
