from typing import Optional

from explorer.errors import bad_request

# Largest value a 64-bit signed INTEGER column can hold
MAX_ID = 2 ** 63 - 1


def parse_id(raw: str, entity: str) -> int:
    """Parse a path id, which must be a positive integer the store can hold."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise bad_request(f"Invalid {entity} id.")
    if value <= 0 or value > MAX_ID:
        raise bad_request(f"Invalid {entity} id.")
    return value


def normalize_name(name: Optional[str], entity: str) -> str:
    if name is None or not name.strip():
        raise bad_request(f"{entity} name is required.")
    return name.strip()
