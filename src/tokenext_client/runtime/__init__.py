"""
Runtime support for the token extension SDK: error model and address type.
"""

from .errors import *
from .address import Address, SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID, SYSVAR_RENT_ID
