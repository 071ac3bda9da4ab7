"""
test_records.py — Tests for the records that embed the value types

Covers:
- PostalAddress validation and immutability
- Relationship id mapping
- Amount and WalletAddress as pydantic field types
"""

import json
from typing import Optional

import pytest
from pydantic import BaseModel, ValidationError

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fractal_utils import (
    Amount,
    PostalAddress,
    Relationship,
    WalletAddress,
    relationship_from_id,
    relationship_id,
)


class Contact(BaseModel):
    """Record embedding every value type, as client code declares them."""

    wallet: WalletAddress
    balance: Amount
    relationship: Relationship
    address: Optional[PostalAddress] = None

    model_config = {"frozen": True}


@pytest.fixture
def postal_address() -> PostalAddress:
    return PostalAddress(
        address1="1 Infinite Loop",
        city="Cupertino",
        state="CA",
        zip="95014",
        country="USA",
    )


# ==============================================================================
# PostalAddress Tests
# ==============================================================================

class TestPostalAddress:

    def test_fields(self, postal_address):
        assert postal_address.address1 == "1 Infinite Loop"
        assert postal_address.address2 is None
        assert postal_address.city == "Cupertino"
        assert postal_address.state == "CA"
        assert postal_address.zip == "95014"
        assert postal_address.country == "USA"

    def test_lines(self, postal_address):
        assert postal_address.lines() == ["1 Infinite Loop", "Cupertino, CA 95014", "USA"]
        with_second_line = postal_address.model_copy(update={"address2": "Building 4"})
        assert with_second_line.lines()[1] == "Building 4"

    def test_frozen(self, postal_address):
        with pytest.raises(ValidationError):
            postal_address.city = "Palo Alto"

    @pytest.mark.parametrize("field", ["address1", "city", "state", "zip", "country"])
    def test_blank_mandatory_field_rejected(self, field):
        data = {
            "address1": "1 Infinite Loop",
            "city": "Cupertino",
            "state": "CA",
            "zip": "95014",
            "country": "USA",
        }
        data[field] = "   "
        with pytest.raises(ValidationError):
            PostalAddress(**data)

    def test_empty_mandatory_field_rejected(self):
        with pytest.raises(ValidationError):
            PostalAddress(address1="", city="Cupertino", state="CA", zip="95014", country="USA")

    def test_text_is_stored_as_given(self):
        address = PostalAddress(
            address1="  1 Infinite Loop ",
            address2=" ",
            city="Cupertino",
            state="CA",
            zip=" 95014",
            country="USA",
        )
        assert address.address1 == "  1 Infinite Loop "
        assert address.address2 == " "
        assert address.zip == " 95014"

    def test_json_round_trip(self, postal_address):
        dumped = postal_address.model_dump_json()
        assert PostalAddress.model_validate_json(dumped) == postal_address


# ==============================================================================
# Relationship Tests
# ==============================================================================

class TestRelationship:

    @pytest.mark.parametrize(
        "relationship, value",
        [
            (Relationship.STRANGER, 0),
            (Relationship.ACQUAINTANCE, 1),
            (Relationship.CO_WORKER, 2),
            (Relationship.FRIEND, 3),
            (Relationship.FAMILY, 4),
        ],
    )
    def test_ids_are_stable(self, relationship, value):
        assert relationship_id(relationship) == value
        assert relationship_from_id(value) is relationship

    def test_unknown_id(self):
        with pytest.raises(ValueError, match="Unknown relationship id: 5"):
            relationship_from_id(5)

    def test_id_requires_relationship(self):
        with pytest.raises(TypeError):
            relationship_id(3)


# ==============================================================================
# Pydantic field integration
# ==============================================================================

class TestFieldTypes:

    def test_validates_from_text(self):
        contact = Contact(wallet="fr111111111", balance="12.5", relationship=3)
        assert contact.wallet == WalletAddress.from_data(bytes(7))
        assert contact.balance == Amount.from_repr(12_500)
        assert contact.relationship is Relationship.FRIEND

    def test_validates_from_instances_and_raw_int(self):
        wallet = WalletAddress.from_data(bytes(7))
        contact = Contact(wallet=wallet, balance=12_500, relationship=Relationship.FRIEND)
        assert contact.wallet is wallet
        assert contact.balance == Amount.parse("12.5")

    def test_serializes_amount_as_raw_integer(self, postal_address):
        contact = Contact(
            wallet="fr111111111",
            balance="175.6465",
            relationship=Relationship.FAMILY,
            address=postal_address,
        )
        dumped = contact.model_dump(mode="json")
        assert dumped["wallet"] == "fr111111111"
        assert dumped["balance"] == 175_647
        assert dumped["relationship"] == 4
        assert dumped["address"]["city"] == "Cupertino"

    def test_json_round_trip(self, postal_address):
        contact = Contact(
            wallet="fr111111111",
            balance=Amount.max_value(),
            relationship=Relationship.CO_WORKER,
            address=postal_address,
        )
        payload = contact.model_dump_json()
        assert json.loads(payload)["balance"] == 2**64 - 1
        assert Contact.model_validate_json(payload) == contact

    @pytest.mark.parametrize("balance", ["175.", "1.2.3", -1, 2**64, 1.5, None])
    def test_invalid_amount(self, balance):
        with pytest.raises(ValidationError):
            Contact(wallet="fr111111111", balance=balance, relationship=0)

    @pytest.mark.parametrize("wallet", ["fr111111112", "xx111111111", "fr0", 7, b"fr111111111"])
    def test_invalid_wallet(self, wallet):
        with pytest.raises(ValidationError):
            Contact(wallet=wallet, balance=0, relationship=0)

    def test_invalid_relationship(self):
        with pytest.raises(ValidationError):
            Contact(wallet="fr111111111", balance=0, relationship=9)

    def test_json_schema(self):
        properties = Contact.model_json_schema()["properties"]
        balance_types = {option["type"] for option in properties["balance"]["anyOf"]}
        assert balance_types == {"integer", "string"}
        integer_option = next(o for o in properties["balance"]["anyOf"] if o["type"] == "integer")
        assert integer_option["minimum"] == 0
        assert integer_option["maximum"] == 2**64 - 1
        assert properties["wallet"]["type"] == "string"

    def test_serialization_json_schema(self):
        properties = Contact.model_json_schema(mode="serialization")["properties"]
        assert properties["balance"]["type"] == "integer"
        assert properties["wallet"]["type"] == "string"
