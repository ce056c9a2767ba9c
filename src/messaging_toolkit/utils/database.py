import uuid


def generate_uid() -> str:
    return str(uuid.uuid4())


def short_uid(length: int = 9) -> str:
    """Random lowercase hex fragment, used as the random tail of readable ids."""
    return uuid.uuid4().hex[:length]
