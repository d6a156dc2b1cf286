"""
Initialization order resolution.

The token program requires a strict phase order inside the creation bundle:

    allocate -> declare extensions -> finalize base mint -> populate metadata

Extensions are declared in one fixed kind order. The metadata pointer is
declared last among them.
There is exactly one legal plan for each input.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..enums import ExtensionKind, StepTag
from ..runtime.errors import ConfigurationError, UnsupportedExtensionError

DECLARATION_ORDER: Tuple[ExtensionKind, ...] = (
    ExtensionKind.TRANSFER_FEE,
    ExtensionKind.PERMANENT_DELEGATE,
    ExtensionKind.INTEREST_BEARING,
    ExtensionKind.TRANSFER_HOOK,
    ExtensionKind.NON_TRANSFERABLE,
    ExtensionKind.DEFAULT_ACCOUNT_STATE,
    ExtensionKind.MINT_CLOSE_AUTHORITY,
    ExtensionKind.METADATA_POINTER,
)


@dataclass(frozen=True)
class InitStep:
    """One abstract initialization step."""
    tag: StepTag
    kind: Optional[ExtensionKind] = None
    field_key: Optional[str] = None

    def __str__(self) -> str:
        if self.kind is not None:
            return f"{self.tag.value}:{self.kind.label}"
        if self.field_key is not None:
            return f"{self.tag.value}:{self.field_key}"
        return self.tag.value


@dataclass(frozen=True)
class InitializationPlan:
    """Ordered initialization steps of one mint."""
    steps: Tuple[InitStep, ...]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __getitem__(self, index: int) -> InitStep:
        return self.steps[index]

    def tags(self) -> List[StepTag]:
        return [step.tag for step in self.steps]

    def declared_kinds(self) -> List[ExtensionKind]:
        return [step.kind for step in self.steps if step.tag == StepTag.EXTENSION_INIT]

    def indices(self, tag: StepTag) -> List[int]:
        return [i for i, step in enumerate(self.steps) if step.tag == tag]

    @property
    def base_index(self) -> int:
        return self.indices(StepTag.BASE_INIT)[0]

    def content_indices(self) -> List[int]:
        return [
            i for i, step in enumerate(self.steps)
            if step.tag in (StepTag.METADATA_INIT, StepTag.METADATA_FIELD_UPDATE)
        ]

    def describe(self) -> List[str]:
        return [str(step) for step in self.steps]

    def is_well_ordered(self) -> bool:
        """
        True when allocation is first, base init follows every extension
        declaration and precedes every metadata-content step.
        """
        if not self.steps or self.steps[0].tag != StepTag.ALLOCATE:
            return False
        if len(self.indices(StepTag.ALLOCATE)) != 1 or len(self.indices(StepTag.BASE_INIT)) != 1:
            return False
        base = self.base_index
        if any(i > base for i in self.indices(StepTag.EXTENSION_INIT)):
            return False
        return all(i > base for i in self.content_indices())


def resolve(
    requested: Iterable[ExtensionKind],
    has_metadata: bool = False,
    additional_fields: Sequence[str] = (),
) -> InitializationPlan:
    """
    Produce the canonical initialization plan.

    Args:
        requested: Extension kinds to declare
        has_metadata: Whether descriptive metadata is written into the mint
        additional_fields: Keys of the additional metadata fields, in
            attachment order

    Raises:
        UnsupportedExtensionError: If confidential balances are requested
        ConfigurationError: If metadata is requested without a metadata
            pointer, or fields are given without metadata
    """
    kinds = set(requested)
    if ExtensionKind.CONFIDENTIAL_BALANCES in kinds:
        raise UnsupportedExtensionError(
            "Confidential balances cannot be initialized: proof generation is not implemented",
            extension=ExtensionKind.CONFIDENTIAL_BALANCES.label,
        )
    if has_metadata and ExtensionKind.METADATA_POINTER not in kinds:
        raise ConfigurationError("Embedded metadata requires a metadata pointer extension")
    if additional_fields and not has_metadata:
        raise ConfigurationError("Additional metadata fields require descriptive metadata")

    steps: List[InitStep] = [InitStep(StepTag.ALLOCATE)]
    steps.extend(InitStep(StepTag.EXTENSION_INIT, kind=kind) for kind in DECLARATION_ORDER if kind in kinds)
    steps.append(InitStep(StepTag.BASE_INIT))
    if has_metadata:
        steps.append(InitStep(StepTag.METADATA_INIT))
        steps.extend(InitStep(StepTag.METADATA_FIELD_UPDATE, field_key=key) for key in additional_fields)
    return InitializationPlan(tuple(steps))


__all__ = ["DECLARATION_ORDER", "InitStep", "InitializationPlan", "resolve"]
