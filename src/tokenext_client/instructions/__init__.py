"""
Instruction encoders for the system program, the token program and the
token metadata interface.
"""

from . import metadata, system, token

__all__ = ["metadata", "system", "token"]
