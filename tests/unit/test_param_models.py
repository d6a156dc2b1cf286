"""
Parameter and metadata model validation.
"""

import pytest
from pydantic import ValidationError

from tokenext_client.enums import AccountState, ExtensionKind
from tokenext_client.models import (
    PARAMS_BY_KIND,
    BaseMintParams,
    DefaultAccountStateParams,
    DescriptiveMetadata,
    InterestBearingParams,
    TransferFeeParams,
)

from helpers.factories import mk_address, mk_keypair, mk_metadata


@pytest.mark.unit
class TestParams:

    def test_aliases_and_field_names(self):
        by_alias = TransferFeeParams(feeBasisPoints=50, maxFee=10)
        by_name = TransferFeeParams(fee_basis_points=50, max_fee=10)
        assert by_alias == by_name

    @pytest.mark.parametrize("bps", [-1, 10_001])
    def test_fee_basis_points_range(self, bps):
        with pytest.raises(ValidationError):
            TransferFeeParams(fee_basis_points=bps, max_fee=0)

    def test_max_fee_is_u64(self):
        TransferFeeParams(fee_basis_points=0, max_fee=2 ** 64 - 1)
        with pytest.raises(ValidationError):
            TransferFeeParams(fee_basis_points=0, max_fee=2 ** 64)

    def test_rate_is_i16(self):
        InterestBearingParams(rate_basis_points=-(2 ** 15))
        with pytest.raises(ValidationError):
            InterestBearingParams(rate_basis_points=2 ** 15)

    def test_default_state_cannot_be_uninitialized(self):
        assert DefaultAccountStateParams().state == AccountState.INITIALIZED
        with pytest.raises(ValidationError):
            DefaultAccountStateParams(state=AccountState.UNINITIALIZED)

    def test_address_coercion(self):
        keypair = mk_keypair("mint-authority")
        from_text = BaseMintParams(decimals=0, mint_authority=str(keypair.address))
        from_keypair = BaseMintParams(decimals=0, mint_authority=keypair)
        assert from_text.mint_authority == from_keypair.mint_authority == keypair.address

    def test_invalid_address(self):
        with pytest.raises(ValidationError):
            BaseMintParams(mint_authority="not-base58-0OIl")

    def test_every_kind_has_a_model(self):
        for kind in ExtensionKind:
            assert PARAMS_BY_KIND[kind].kind() == kind

    def test_models_are_frozen(self):
        params = TransferFeeParams(fee_basis_points=1, max_fee=1)
        with pytest.raises(ValidationError):
            params.max_fee = 2


@pytest.mark.unit
class TestDescriptiveMetadata:

    def test_byte_limits_count_utf8(self):
        mk_metadata(name="x" * 32)
        with pytest.raises(ValidationError):
            mk_metadata(name="é" * 17)
        with pytest.raises(ValidationError):
            mk_metadata(symbol="ABCDEFGHIJK")
        with pytest.raises(ValidationError):
            mk_metadata(uri="u" * 201)

    def test_mapping_keeps_order(self):
        metadata = mk_metadata(additional={"b": "1", "a": "2"})
        assert metadata.additional == [("b", "1"), ("a", "2")]

    def test_duplicate_keys(self):
        with pytest.raises(ValidationError):
            mk_metadata(additional=[("k", "1"), ("k", "2")])

    def test_empty_key(self):
        with pytest.raises(ValidationError):
            mk_metadata(additional=[("", "1")])

    def test_with_field(self):
        metadata = mk_metadata(fields=1, update_authority=mk_address("ua"))
        extended = metadata.with_field("extra", "x")
        assert extended.additional == [("key0", "value0"), ("extra", "x")]
        assert extended.update_authority == metadata.update_authority
        assert metadata.additional == [("key0", "value0")]
        with pytest.raises(ValidationError):
            extended.with_field("extra", "y")

    def test_alias_input(self):
        metadata = DescriptiveMetadata(name="N", symbol="S", uri="U", additionalMetadata=[["k", "v"]])
        assert metadata.additional == [("k", "v")]
