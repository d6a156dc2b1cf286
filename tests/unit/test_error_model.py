"""
Structured error hierarchy.
"""

import pytest

from tokenext_client.composer.rules import find_rule
from tokenext_client.enums import ExtensionKind
from tokenext_client.runtime.errors import (
    AccountNotFoundError,
    BuilderConsumedError,
    CompatibilityError,
    ConfigurationError,
    ErrorCode,
    LayoutError,
    SubmissionError,
    TokenExtError,
    UnsupportedExtensionError,
)


@pytest.mark.unit
class TestErrors:

    def test_hierarchy(self):
        for error in (
            ConfigurationError("x"),
            UnsupportedExtensionError("x"),
            BuilderConsumedError(),
            LayoutError("x"),
            SubmissionError("x"),
            AccountNotFoundError(),
        ):
            assert isinstance(error, TokenExtError)
        assert isinstance(UnsupportedExtensionError("x"), ConfigurationError)

    def test_configuration_issues(self):
        error = ConfigurationError("bad params", issues=["max_fee: too large"])
        assert error.code == ErrorCode.INVALID_CONFIGURATION
        assert error.to_dict() == {
            "code": 100,
            "message": "bad params",
            "details": {"issues": ["max_fee: too large"]},
        }

    def test_unsupported_extension_details(self):
        error = UnsupportedExtensionError("no proofs", extension="ConfidentialBalances")
        assert error.code == ErrorCode.UNSUPPORTED_EXTENSION
        assert error.details["extension"] == "ConfidentialBalances"

    def test_compatibility_lists_every_violation(self):
        rule = find_rule(ExtensionKind.NON_TRANSFERABLE, ExtensionKind.TRANSFER_FEE)
        error = CompatibilityError([rule])
        assert error.violations == [rule]
        assert error.details["violations"] == [rule.describe()]
        assert "NonTransferable" in str(error)

    def test_layout_limits(self):
        error = LayoutError("too big", size=20_000, limit=10_240)
        assert (error.size, error.limit) == (20_000, 10_240)
        assert error.details == {"size": 20_000, "limit": 10_240}

    def test_submission_reason_and_cause(self):
        cause = RuntimeError("node said no")
        error = SubmissionError("blockhash expired", cause=cause)
        assert error.reason == "blockhash expired"
        assert "Caused by: node said no" in str(error)
        assert error.to_dict()["cause"] == "node said no"
