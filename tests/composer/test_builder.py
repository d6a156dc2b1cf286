"""
Composition builder: attachment validation, plan() and execute().
"""

from unittest.mock import Mock

import pytest

from tokenext_client.composer import CompositionBuilder
from tokenext_client.enums import AccountState, ExtensionKind, StepTag
from tokenext_client.instructions.metadata import INITIALIZE_DISCRIMINATOR, UPDATE_FIELD_DISCRIMINATOR
from tokenext_client.instructions.token import TokenInstruction
from tokenext_client.ledger import Confirmation
from tokenext_client.models import TransferFeeParams
from tokenext_client.runtime.address import SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID
from tokenext_client.runtime.errors import (
    BuilderConsumedError,
    CompatibilityError,
    ConfigurationError,
    LayoutError,
    SubmissionError,
    UnsupportedExtensionError,
)

from helpers.factories import mk_address, mk_keypair, mk_metadata

K = ExtensionKind


@pytest.mark.unit
class TestAttachment:

    def test_valid_attachments_chain(self, payer):
        builder = (
            CompositionBuilder()
            .with_base(decimals=6, mint_authority=payer.address)
            .with_transfer_fee(fee_basis_points=100, max_fee=1_000)
            .with_permanent_delegate(delegate=mk_address("delegate"))
            .with_interest_bearing(rate=250)
        )
        assert builder.state.kinds == [K.TRANSFER_FEE, K.INTEREST_BEARING, K.PERMANENT_DELEGATE]
        assert builder.state.base.decimals == 6

    @pytest.mark.parametrize("kwargs", [
        {"fee_basis_points": 10_001, "max_fee": 1},
        {"fee_basis_points": -1, "max_fee": 1},
        {"fee_basis_points": 100, "max_fee": -5},
        {"fee_basis_points": 100, "max_fee": 2 ** 64},
    ])
    def test_invalid_transfer_fee_fails_at_attachment(self, kwargs):
        with pytest.raises(ConfigurationError) as exc_info:
            CompositionBuilder().with_transfer_fee(**kwargs)
        assert exc_info.value.issues

    def test_accepts_model_instance_and_camel_case_dict(self):
        params = TransferFeeParams(fee_basis_points=10, max_fee=10)
        a = CompositionBuilder().with_transfer_fee(params)
        b = CompositionBuilder().with_transfer_fee({"feeBasisPoints": 10, "maxFee": 10})
        assert a.state.extensions[K.TRANSFER_FEE] == b.state.extensions[K.TRANSFER_FEE]

    def test_model_and_kwargs_together_rejected(self):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_transfer_fee(TransferFeeParams(fee_basis_points=1, max_fee=1), max_fee=2)

    @pytest.mark.parametrize("overrides", [
        {"name": "N" * 33},
        {"symbol": "S" * 11},
        {"uri": "u" * 201},
        {"name": "é" * 17},
    ])
    def test_oversized_metadata_fails_at_attachment(self, overrides):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_metadata(**{"name": "n", "symbol": "s", "uri": "u", **overrides})

    def test_uninitialized_default_state_rejected(self):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_default_account_state(state=AccountState.UNINITIALIZED)

    def test_confidential_balances_rejected_immediately(self):
        with pytest.raises(UnsupportedExtensionError):
            CompositionBuilder().with_confidential_balances()

    def test_metadata_adds_self_pointer(self):
        builder = CompositionBuilder().with_metadata(mk_metadata())
        pointer = builder.state.extensions[K.METADATA_POINTER]
        assert pointer.metadata_address is None

    def test_explicit_pointer_kept(self, authority):
        builder = (
            CompositionBuilder()
            .with_metadata_pointer(authority=authority.address)
            .with_metadata(mk_metadata())
        )
        assert builder.state.extensions[K.METADATA_POINTER].authority == authority.address

    def test_pointer_elsewhere_conflicts_with_embedded_metadata(self):
        elsewhere = mk_address("elsewhere")
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_metadata_pointer(metadata_address=elsewhere).with_metadata(mk_metadata())
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_metadata(mk_metadata()).with_metadata_pointer(metadata_address=elsewhere)

    def test_additional_field_requires_metadata(self):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().with_additional_field("k", "v")

    def test_duplicate_additional_field_rejected(self):
        builder = CompositionBuilder().with_metadata(mk_metadata(fields=1))
        with pytest.raises(ConfigurationError):
            builder.with_additional_field("key0", "again")


@pytest.mark.unit
class TestPlan:

    def test_plan_emits_one_instruction_per_step(self, payer):
        plan = (
            CompositionBuilder()
            .with_base(mint_authority=payer.address)
            .with_transfer_fee(fee_basis_points=100, max_fee=1_000)
            .with_metadata(mk_metadata(fields=1))
            .plan()
        )

        assert len(plan.instructions) == len(plan.initialization_plan)
        allocate, fee, pointer, base, meta_init, field = plan.instructions
        assert allocate.program_id == SYSTEM_PROGRAM_ID
        assert fee.data[:2] == bytes([TokenInstruction.TRANSFER_FEE_EXTENSION, 0])
        assert pointer.data[:2] == bytes([TokenInstruction.METADATA_POINTER_EXTENSION, 0])
        assert base.data[0] == TokenInstruction.INITIALIZE_MINT
        assert meta_init.data[:8] == INITIALIZE_DISCRIMINATOR
        assert field.data[:8] == UPDATE_FIELD_DISCRIMINATOR
        assert all(ix.program_id == TOKEN_2022_PROGRAM_ID for ix in plan.instructions[1:])

    def test_allocation_reserves_extensions_and_funds_total(self, payer):
        plan = CompositionBuilder().with_base(mint_authority=payer.address).with_metadata(mk_metadata()).plan()
        data = plan.instructions[0].data

        lamports = int.from_bytes(data[4:12], "little")
        space = int.from_bytes(data[12:20], "little")
        assert space == plan.layout.allocation_size
        assert lamports == plan.layout.required_funding
        assert plan.layout.total_size > space

    def test_plan_without_ledger_uses_offline_schedule(self, payer):
        plan = CompositionBuilder().with_base(mint_authority=payer.address).plan()
        assert plan.layout.required_funding == 1_461_600

    def test_plan_with_ledger_asks_for_funding(self, payer):
        ledger = Mock()
        ledger.minimum_funding.return_value = 7
        plan = CompositionBuilder(ledger=ledger).with_base(mint_authority=payer.address).plan()

        ledger.minimum_funding.assert_called_once_with(82)
        ledger.submit_atomic.assert_not_called()
        assert plan.layout.required_funding == 7

    def test_payer_defaults_to_mint_authority(self, payer):
        plan = CompositionBuilder().with_base(mint_authority=payer.address).plan()
        assert plan.payer == payer.address
        assert plan.required_signers == [payer.address, plan.mint_address]

    def test_plan_needs_base_or_payer(self, payer):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().plan()
        plan = CompositionBuilder().plan(payer=payer.address)
        assert plan.payer == payer.address

    def test_authorities_default_to_mint_authority(self, payer):
        plan = (
            CompositionBuilder()
            .with_base(mint_authority=payer.address)
            .with_transfer_fee(fee_basis_points=100, max_fee=10 ** 9)
            .with_interest_bearing(rate_basis_points=50)
            .with_transfer_hook(program_id=mk_address("hook"))
            .with_metadata(mk_metadata(fields=1))
            .plan()
        )
        fee, rate, hook, pointer = plan.instructions[1:5]
        owner = payer.address.to_bytes()
        assert fee.data[:2] == bytes([TokenInstruction.TRANSFER_FEE_EXTENSION, 0])
        assert fee.data[2:35] == b"\x01" + owner
        assert fee.data[35:68] == b"\x01" + owner
        assert rate.data[2:34] == owner
        assert hook.data[2:34] == owner
        assert pointer.data[2:34] == owner
        assert pointer.data[34:66] == plan.mint_address.to_bytes()
        assert plan.instructions[-1].accounts[1].address == payer.address

    def test_frozen_default_state_requires_freeze_authority(self, payer):
        ledger = Mock()
        builder = (
            CompositionBuilder(ledger=ledger)
            .with_base(mint_authority=payer.address)
            .with_default_account_state(state=AccountState.FROZEN)
        )
        with pytest.raises(ConfigurationError) as exc_info:
            builder.plan()
        assert any("freeze_authority" in issue for issue in exc_info.value.issues)
        ledger.minimum_funding.assert_not_called()

    def test_frozen_default_state_with_freeze_authority_plans(self, payer):
        plan = (
            CompositionBuilder()
            .with_base(mint_authority=payer.address, freeze_authority=payer.address)
            .with_default_account_state(state=AccountState.FROZEN)
            .plan()
        )
        base = plan.instructions[-1]
        assert base.data[:2] == bytes([TokenInstruction.INITIALIZE_MINT, 9])
        assert base.data[34:67] == b"\x01" + payer.address.to_bytes()

    def test_separate_update_authority_must_sign(self, payer, authority):
        plan = (
            CompositionBuilder()
            .with_base(mint_authority=payer.address)
            .with_metadata(mk_metadata(fields=1, update_authority=authority.address))
            .plan()
        )
        assert authority.address in plan.required_signers

    def test_incompatible_set_fails_before_funding(self, payer):
        ledger = Mock()
        builder = (
            CompositionBuilder(ledger=ledger)
            .with_base(mint_authority=payer.address)
            .with_non_transferable()
            .with_transfer_fee(fee_basis_points=1, max_fee=1)
            .with_transfer_hook(program_id=mk_address("hook"))
        )
        with pytest.raises(CompatibilityError) as exc_info:
            builder.plan()
        assert len(exc_info.value.violations) == 2
        ledger.minimum_funding.assert_not_called()

    def test_layout_error_fails_before_funding(self, payer):
        ledger = Mock()
        metadata = mk_metadata(additional=[(f"k{i}", "v" * 200) for i in range(60)])
        builder = CompositionBuilder(ledger=ledger).with_base(mint_authority=payer.address).with_metadata(metadata)
        with pytest.raises(LayoutError):
            builder.plan()
        ledger.minimum_funding.assert_not_called()

    def test_plan_to_dict(self, payer):
        data = CompositionBuilder().with_base(mint_authority=payer.address).plan().to_dict()
        assert data["steps"] == ["allocate", "base-init"]
        assert data["layout"]["totalSize"] == 82


@pytest.mark.unit
class TestConsumption:

    def test_second_plan_rejected(self, payer):
        builder = CompositionBuilder().with_base(mint_authority=payer.address)
        builder.plan()
        with pytest.raises(BuilderConsumedError):
            builder.plan()

    def test_attachment_after_plan_rejected(self, payer):
        builder = CompositionBuilder().with_base(mint_authority=payer.address)
        builder.plan()
        with pytest.raises(BuilderConsumedError):
            builder.with_non_transferable()

    def test_failed_terminal_call_consumes(self, payer):
        builder = (
            CompositionBuilder()
            .with_base(mint_authority=payer.address)
            .with_non_transferable()
            .with_transfer_fee(fee_basis_points=1, max_fee=1)
        )
        with pytest.raises(CompatibilityError):
            builder.plan()
        with pytest.raises(BuilderConsumedError):
            builder.plan()

    def test_plan_submits_once(self, payer):
        ledger = Mock()
        ledger.minimum_funding.return_value = 1
        ledger.submit_atomic.return_value = Confirmation("sig")
        plan = CompositionBuilder(ledger=ledger).with_base(mint_authority=payer.address).plan()

        plan.submit(ledger, payer)
        with pytest.raises(BuilderConsumedError):
            plan.submit(ledger, payer)
        assert ledger.submit_atomic.call_count == 1


@pytest.mark.unit
class TestExecute:

    def test_execute_requires_ledger(self, payer):
        with pytest.raises(ConfigurationError):
            CompositionBuilder().execute(payer)

    def test_execute_submits_all_signers(self, payer):
        ledger = Mock()
        ledger.minimum_funding.return_value = 1
        ledger.submit_atomic.return_value = Confirmation("sig", 3)

        result = CompositionBuilder(ledger=ledger).with_transfer_fee(fee_basis_points=5, max_fee=5).execute(payer)

        instructions, signers, fee_payer = ledger.submit_atomic.call_args[0]
        assert fee_payer == payer.address
        assert signers[0] is payer
        assert signers[1] is result.mint
        assert len(instructions) == 3
        assert result.signature == "sig"
        assert result.address == result.mint.address

    def test_missing_signer_fails_before_submission(self, payer, authority):
        ledger = Mock()
        ledger.minimum_funding.return_value = 1
        builder = (
            CompositionBuilder(ledger=ledger)
            .with_base(mint_authority=authority.address)
            .with_metadata(mk_metadata())
        )
        with pytest.raises(ConfigurationError) as exc_info:
            builder.execute(payer)
        assert str(authority.address) in exc_info.value.issues
        ledger.submit_atomic.assert_not_called()

    def test_submission_error_propagates_verbatim(self, payer):
        ledger = Mock()
        ledger.minimum_funding.return_value = 1
        ledger.submit_atomic.side_effect = SubmissionError("insufficient funds")

        with pytest.raises(SubmissionError) as exc_info:
            CompositionBuilder(ledger=ledger).execute(payer)
        assert exc_info.value.reason == "insufficient funds"

    def test_fee_payer_must_match_plan(self, payer):
        ledger = Mock()
        plan = CompositionBuilder().with_base(mint_authority=payer.address).plan()
        with pytest.raises(ConfigurationError):
            plan.submit(ledger, mk_keypair("someone-else"))
        ledger.submit_atomic.assert_not_called()
