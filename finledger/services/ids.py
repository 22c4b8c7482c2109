"""Identifier generation for ledger entities."""

from typing import Callable
from uuid import uuid4

IdGenerator = Callable[[], str]


def generate_id() -> str:
    """
    Return a new opaque entity identifier.

    Only uniqueness is promised, not ordering or format.
    """
    return uuid4().hex
