"""
Identifier generation for tree nodes.

Ids are opaque short alphanumeric strings; they only need to be unique
within one tree, so callers holding a tree pass its ids as ``taken``.
"""

import secrets
from typing import Callable, Container, Optional

from arbor.constants import ID_ALPHABET, get_id_length

IdFactory = Callable[[], str]

# Enough attempts that a collision streak means a broken factory.
_MAX_ATTEMPTS = 100


def fresh_id(length: Optional[int] = None) -> str:
    """Generate a random alphanumeric id (8 characters by default)."""
    size = length if length is not None else get_id_length()
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(size))


def unique_id(taken: Container[str], id_factory: IdFactory = fresh_id) -> str:
    """Generate an id that is not in ``taken``.

    Raises:
        RuntimeError: If the factory keeps returning taken ids.
    """
    for _ in range(_MAX_ATTEMPTS):
        candidate = id_factory()
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"Could not generate a unique id after {_MAX_ATTEMPTS} attempts")
