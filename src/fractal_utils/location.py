"""
location.py — Postal address record

The particulars of the place where an organization or person resides.
Plain data: every field is stored as given, only blank mandatory fields
are rejected.
"""

from typing import Final, Optional

from pydantic import BaseModel, Field


# At least one non-whitespace character.
NOT_BLANK: Final[str] = r"\S"


class PostalAddress(BaseModel):
    """
    Postal address of an organization or person.

    Immutable (frozen=True): a change of address is a new instance.
    """

    address1: str = Field(..., pattern=NOT_BLANK, description="First address line")
    address2: Optional[str] = Field(default=None, description="Second address line")
    city: str = Field(..., pattern=NOT_BLANK, description="City")
    state: str = Field(..., pattern=NOT_BLANK, description="State or province")
    zip: str = Field(..., pattern=NOT_BLANK, description="Zip or postal code")
    country: str = Field(..., pattern=NOT_BLANK, description="Country")

    model_config = {"frozen": True}

    def lines(self) -> list[str]:
        """Address as printable lines, skipping the empty second line."""
        lines = [self.address1]
        if self.address2:
            lines.append(self.address2)
        lines.append(f"{self.city}, {self.state} {self.zip}")
        lines.append(self.country)
        return lines
