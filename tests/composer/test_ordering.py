"""
Initialization order resolution.
"""

from itertools import combinations

import pytest

from tokenext_client.composer.ordering import DECLARATION_ORDER, InitializationPlan, InitStep, resolve
from tokenext_client.enums import ExtensionKind, StepTag
from tokenext_client.runtime.errors import ConfigurationError, UnsupportedExtensionError

K = ExtensionKind
COMPOSABLE = [k for k in K if k != K.CONFIDENTIAL_BALANCES]


@pytest.mark.unit
class TestResolve:

    def test_plain_mint(self):
        plan = resolve([])
        assert plan.tags() == [StepTag.ALLOCATE, StepTag.BASE_INIT]
        assert plan.is_well_ordered()

    def test_declaration_order_is_fixed(self):
        plan = resolve(reversed(COMPOSABLE))
        assert plan.declared_kinds() == list(DECLARATION_ORDER)

    def test_metadata_pointer_declared_last(self):
        plan = resolve([K.METADATA_POINTER, K.MINT_CLOSE_AUTHORITY, K.TRANSFER_FEE])
        assert plan.declared_kinds()[-1] == K.METADATA_POINTER

    def test_metadata_content_follows_base(self):
        plan = resolve([K.METADATA_POINTER], has_metadata=True, additional_fields=["a", "b"])
        assert plan.describe() == [
            "allocate",
            "extension-init:MetadataPointer",
            "base-init",
            "metadata-init",
            "metadata-field-update:a",
            "metadata-field-update:b",
        ]

    def test_field_updates_keep_attachment_order(self):
        plan = resolve([K.METADATA_POINTER], True, ["zeta", "alpha", "mid"])
        keys = [plan[i].field_key for i in plan.indices(StepTag.METADATA_FIELD_UPDATE)]
        assert keys == ["zeta", "alpha", "mid"]

    @pytest.mark.parametrize("size", range(len(COMPOSABLE) + 1))
    def test_base_init_separates_phases_for_every_subset(self, size):
        for subset in combinations(COMPOSABLE, size):
            has_metadata = K.METADATA_POINTER in subset
            plan = resolve(subset, has_metadata, ["k"] if has_metadata else [])
            base = plan.base_index
            assert all(i < base for i in plan.indices(StepTag.EXTENSION_INIT))
            assert all(i > base for i in plan.content_indices())
            assert plan.tags()[0] == StepTag.ALLOCATE
            assert plan.is_well_ordered()
            assert len(plan.declared_kinds()) == len(subset)

    def test_identical_input_gives_identical_plan(self):
        a = resolve({K.TRANSFER_FEE, K.METADATA_POINTER}, True, ["x"])
        b = resolve([K.METADATA_POINTER, K.TRANSFER_FEE], True, ["x"])
        assert a == b


@pytest.mark.unit
class TestResolveRejections:

    def test_confidential_balances_unsupported(self):
        with pytest.raises(UnsupportedExtensionError) as exc_info:
            resolve([K.CONFIDENTIAL_BALANCES])
        assert exc_info.value.extension == "ConfidentialBalances"

    def test_metadata_requires_pointer(self):
        with pytest.raises(ConfigurationError):
            resolve([K.TRANSFER_FEE], has_metadata=True)

    def test_fields_require_metadata(self):
        with pytest.raises(ConfigurationError):
            resolve([K.METADATA_POINTER], has_metadata=False, additional_fields=["a"])


@pytest.mark.unit
class TestWellOrdered:

    def test_detects_extension_after_base(self):
        plan = InitializationPlan((
            InitStep(StepTag.ALLOCATE),
            InitStep(StepTag.BASE_INIT),
            InitStep(StepTag.EXTENSION_INIT, kind=K.TRANSFER_FEE),
        ))
        assert not plan.is_well_ordered()

    def test_detects_metadata_before_base(self):
        plan = InitializationPlan((
            InitStep(StepTag.ALLOCATE),
            InitStep(StepTag.EXTENSION_INIT, kind=K.METADATA_POINTER),
            InitStep(StepTag.METADATA_INIT),
            InitStep(StepTag.BASE_INIT),
        ))
        assert not plan.is_well_ordered()

    def test_detects_missing_allocation(self):
        assert not InitializationPlan((InitStep(StepTag.BASE_INIT),)).is_well_ordered()
        assert not InitializationPlan(()).is_well_ordered()
