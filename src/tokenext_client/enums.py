# Enumerations for the token extension SDK
# Values follow the token program's on-ledger numbering

from enum import Enum, IntEnum


class ExtensionType(IntEnum):
    """Every TLV entry type the token program can write into an account."""
    UNINITIALIZED = 0
    TRANSFER_FEE_CONFIG = 1
    TRANSFER_FEE_AMOUNT = 2
    MINT_CLOSE_AUTHORITY = 3
    CONFIDENTIAL_TRANSFER_MINT = 4
    CONFIDENTIAL_TRANSFER_ACCOUNT = 5
    DEFAULT_ACCOUNT_STATE = 6
    IMMUTABLE_OWNER = 7
    MEMO_TRANSFER = 8
    NON_TRANSFERABLE = 9
    INTEREST_BEARING_CONFIG = 10
    CPI_GUARD = 11
    PERMANENT_DELEGATE = 12
    NON_TRANSFERABLE_ACCOUNT = 13
    TRANSFER_HOOK = 14
    TRANSFER_HOOK_ACCOUNT = 15
    CONFIDENTIAL_TRANSFER_FEE_CONFIG = 16
    CONFIDENTIAL_TRANSFER_FEE_AMOUNT = 17
    METADATA_POINTER = 18
    TOKEN_METADATA = 19


class ExtensionKind(IntEnum):
    """
    The closed set of mint features a composition can request.

    Each value is the TLV type code the feature occupies in a mint account.
    """
    TRANSFER_FEE = 1
    MINT_CLOSE_AUTHORITY = 3
    CONFIDENTIAL_BALANCES = 4
    DEFAULT_ACCOUNT_STATE = 6
    NON_TRANSFERABLE = 9
    INTEREST_BEARING = 10
    PERMANENT_DELEGATE = 12
    TRANSFER_HOOK = 14
    METADATA_POINTER = 18

    @property
    def extension_type(self) -> ExtensionType:
        return ExtensionType(self.value)

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ExtensionKind.TRANSFER_FEE: "TransferFee",
    ExtensionKind.MINT_CLOSE_AUTHORITY: "MintCloseAuthority",
    ExtensionKind.CONFIDENTIAL_BALANCES: "ConfidentialBalances",
    ExtensionKind.DEFAULT_ACCOUNT_STATE: "DefaultAccountState",
    ExtensionKind.NON_TRANSFERABLE: "NonTransferable",
    ExtensionKind.INTEREST_BEARING: "InterestBearing",
    ExtensionKind.PERMANENT_DELEGATE: "PermanentDelegate",
    ExtensionKind.TRANSFER_HOOK: "TransferHook",
    ExtensionKind.METADATA_POINTER: "MetadataPointer",
}


class AccountState(IntEnum):
    """Token account state, also used as a mint's default account state."""
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


class AccountType(IntEnum):
    """Marker byte written after the padded base record of an extended account."""
    UNINITIALIZED = 0
    MINT = 1
    ACCOUNT = 2


class StepTag(str, Enum):
    """Phase tag of an initialization step."""
    ALLOCATE = "allocate"
    EXTENSION_INIT = "extension-init"
    BASE_INIT = "base-init"
    METADATA_INIT = "metadata-init"
    METADATA_FIELD_UPDATE = "metadata-field-update"


class MetadataField(IntEnum):
    """Field selector of a metadata update; custom keys use KEY."""
    NAME = 0
    SYMBOL = 1
    URI = 2
    KEY = 3


class Commitment(str, Enum):
    """Ledger confirmation levels."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


__all__ = [
    "ExtensionType",
    "ExtensionKind",
    "AccountState",
    "AccountType",
    "StepTag",
    "MetadataField",
    "Commitment",
]
