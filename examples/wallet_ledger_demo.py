#!/usr/bin/env python3
"""
wallet_ledger_demo.py — Amounts and wallet addresses end to end

Parses user input the way a ledger front end would: untrusted text goes
through the parsers, trusted storage goes through the raw constructors,
and the records travel as JSON with the amount as its raw integer.
"""

import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import BaseModel

from fractal_utils import (
    CURRENCY_SYMBOL,
    WALLET_ADDRESS_LEN,
    Amount,
    AmountParseError,
    WalletAddress,
    WalletAddressParseError,
)


class Transfer(BaseModel):
    """A transfer request as it would arrive from a client."""

    origin: WalletAddress
    destination: WalletAddress
    amount: Amount

    model_config = {"frozen": True}


def demonstrate_amounts():
    print("=" * 60)
    print("AMOUNTS")
    print("=" * 60)
    for text in ["175.6465", "175.6464", ".6465", "56", "175.", "1.2.3"]:
        try:
            amount = Amount.parse(text)
        except AmountParseError as e:
            print(f"  {text!r:>12} -> rejected: {e.kind.code}")
            continue
        print(f"  {text!r:>12} -> {amount!s:>10}  raw={amount.value}  {amount:.2}")

    balance = Amount.parse("100")
    fee = Amount.parse("0.25")
    print(f"\n  balance - 3 * fee = {CURRENCY_SYMBOL} {balance - fee * 3}")
    print(f"  balance // 3      = {CURRENCY_SYMBOL} {balance // 3}")


def demonstrate_addresses():
    print("\n" + "=" * 60)
    print("WALLET ADDRESSES")
    print("=" * 60)
    stored = bytes([0x00, 0x11, 0x2A, 0x44, 0xCD, 0xFF, 0xE0])
    address = WalletAddress.from_data(stored)
    print(f"  raw {stored.hex()} -> {address}  checksum={address.checksum.hex()}")

    typo = str(address)[:-1] + ("1" if str(address)[-1] != "1" else "2")
    for text in [str(address), typo, "fx111111111", "fr11111O111"]:
        try:
            WalletAddress.parse(text)
            print(f"  {text:>16} -> ok")
        except WalletAddressParseError as e:
            print(f"  {text:>16} -> rejected: {e.kind.code}")


def demonstrate_records():
    print("\n" + "=" * 60)
    print("RECORDS")
    print("=" * 60)
    zero = WalletAddress.from_data(bytes(WALLET_ADDRESS_LEN))
    transfer = Transfer(origin=zero, destination="fr111111111", amount="12.5")
    payload = transfer.model_dump_json()
    print(f"  {payload}")
    assert Transfer.model_validate_json(payload) == transfer


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.WARNING)
    demonstrate_amounts()
    demonstrate_addresses()
    demonstrate_records()
