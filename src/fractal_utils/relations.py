"""
relations.py — Relationships between users and their stable ids

The ids are stored and transmitted, so they must never be renumbered.
"""

from enum import Enum


class Relationship(Enum):
    """Relationship of a contact to the user."""
    STRANGER = 0
    ACQUAINTANCE = 1
    CO_WORKER = 2
    FRIEND = 3
    FAMILY = 4


def relationship_id(relationship: Relationship) -> int:
    """Translates a relationship to its id."""
    if not isinstance(relationship, Relationship):
        raise TypeError(f"Expected a Relationship, got {type(relationship).__name__}")
    return relationship.value


def relationship_from_id(value: int) -> Relationship:
    """
    Grabs the relationship for the given id.

    Raises:
        ValueError: if no relationship has that id
    """
    try:
        return Relationship(value)
    except ValueError as e:
        raise ValueError(f"Unknown relationship id: {value!r}") from e
