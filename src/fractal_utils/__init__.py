"""
fractal_utils — Value types for Fractal Global Credits

Exact currency amounts and checksummed wallet addresses, plus the small
records that embed them.

================================================================================
QUICK START
================================================================================

Amounts (fixed point, thousandths, never floats):

    from fractal_utils import Amount, CURRENCY_SYMBOL

    amount = Amount.parse("175.6465")     # rounded half-up to 175.647
    assert amount == Amount.from_repr(175_647)
    assert f"{amount:.2}" == "175.65"
    print(f"{CURRENCY_SYMBOL} {amount}")  # Ͼ 175.647

Wallet addresses (verified on parse):

    from fractal_utils import WalletAddress, WALLET_ADDRESS_LEN

    addr = WalletAddress.from_data(bytes(WALLET_ADDRESS_LEN))
    assert str(addr) == "fr111111111"
    assert WalletAddress.parse("fr111111111") == addr

Records:

    from pydantic import BaseModel

    class Payment(BaseModel):
        to: WalletAddress
        amount: Amount

    Payment(to="fr111111111", amount="12.5").model_dump(mode="json")
    # {'to': 'fr111111111', 'amount': 12500}

================================================================================
"""

import logging

from .amount import (
    CURRENCY_SYMBOL,
    SCALE,
    Amount,
    AmountParseError,
    AmountParseErrorKind,
)
from .location import PostalAddress
from .relations import (
    Relationship,
    relationship_from_id,
    relationship_id,
)
from .wallet_address import (
    WALLET_ADDRESS_LEN,
    WALLET_ADDRESS_TAG,
    InvalidBase58Character,
    WalletAddress,
    WalletAddressParseError,
    WalletAddressParseErrorKind,
    checksum,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.3.0"
__license__ = "MIT"

__all__ = [
    # Amount
    "CURRENCY_SYMBOL",
    "SCALE",
    "Amount",
    "AmountParseError",
    "AmountParseErrorKind",
    # Wallet address
    "WALLET_ADDRESS_LEN",
    "WALLET_ADDRESS_TAG",
    "InvalidBase58Character",
    "WalletAddress",
    "WalletAddressParseError",
    "WalletAddressParseErrorKind",
    "checksum",
    # Records
    "PostalAddress",
    "Relationship",
    "relationship_id",
    "relationship_from_id",
]
