"""
Offline rent schedule.

Computes the minimum balance that keeps an account alive indefinitely with
the ledger's default storage-funding parameters, without a network call.
"""

from __future__ import annotations
from dataclasses import dataclass

ACCOUNT_STORAGE_OVERHEAD = 128
DEFAULT_LAMPORTS_PER_BYTE_YEAR = 3480
DEFAULT_EXEMPTION_THRESHOLD = 2.0


@dataclass(frozen=True)
class RentSchedule:
    """Storage-funding parameters."""
    lamports_per_byte_year: int = DEFAULT_LAMPORTS_PER_BYTE_YEAR
    exemption_threshold: float = DEFAULT_EXEMPTION_THRESHOLD

    def minimum_funding(self, byte_size: int) -> int:
        """
        Minimum balance for an account of ``byte_size`` data bytes.

        Raises:
            ValueError: If the size is negative
        """
        if byte_size < 0:
            raise ValueError(f"Account size cannot be negative: {byte_size}")
        bytes_with_overhead = ACCOUNT_STORAGE_OVERHEAD + byte_size
        return int(bytes_with_overhead * self.lamports_per_byte_year * self.exemption_threshold)


__all__ = ["RentSchedule", "ACCOUNT_STORAGE_OVERHEAD"]
