"""
Runtime support: error model, hex helpers and the address type.
"""

from .errors import *
from .hexutil import *
from .address import ADDRESS_LENGTH, AddressType, EthereumAddress, keccak256
