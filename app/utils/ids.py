import uuid


def new_id() -> str:
    """Opaque, globally unique entity id (32 hex chars)."""
    return uuid.uuid4().hex
