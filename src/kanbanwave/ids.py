"""Entity ID generation."""

import uuid


def new_id() -> str:
    """Return a fresh random UUID string."""
    return str(uuid.uuid4())
