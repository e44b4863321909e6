from dataclasses import dataclass
from typing import Optional

from explorer.config import settings
from explorer.errors import bad_request
from explorer.utils.validation import MAX_ID

MAX_OFFSET = MAX_ID


@dataclass(frozen=True)
class Pagination:
    limit: Optional[int] = None
    offset: Optional[int] = None

    @property
    def cache_suffix(self) -> str:
        return f"{self.limit}:{self.offset}"


def _parse_optional_int(raw: Optional[str], name: str) -> Optional[int]:
    text = raw.strip() if raw is not None else ""
    if not text:
        return None
    try:
        # Whole numbers go through int() so large values keep their precision
        return int(text) if text.lstrip("+-").isdigit() else int(float(text))
    except (TypeError, ValueError, OverflowError):
        raise bad_request(f"{name} must be a number.")


def parse_pagination(limit: Optional[str], offset: Optional[str]) -> Optional[Pagination]:
    """
    Validate raw `limit`/`offset` query values.

    Returns None when neither is given, so callers can tell "no pagination"
    apart from an explicit first page.
    """
    limit_value = _parse_optional_int(limit, "limit")
    offset_value = _parse_optional_int(offset, "offset")

    if limit_value is None and offset_value is None:
        return None
    if limit_value is not None and limit_value <= 0:
        raise bad_request("limit must be a positive number.")
    if limit_value is not None and limit_value > settings.MAX_PAGE_LIMIT:
        raise bad_request(f"limit must be <= {settings.MAX_PAGE_LIMIT}.")
    if offset_value is not None and offset_value < 0:
        raise bad_request("offset must be 0 or greater.")
    if offset_value is not None and offset_value > MAX_OFFSET:
        raise bad_request(f"offset must be <= {MAX_OFFSET}.")

    return Pagination(limit=limit_value, offset=offset_value)


def cache_suffix(pagination: Optional[Pagination]) -> str:
    return pagination.cache_suffix if pagination else "None:None"


def apply_pagination(query, pagination: Optional[Pagination]):
    """Apply LIMIT/OFFSET to a SQLAlchemy query."""
    if pagination is None:
        return query
    if pagination.offset:
        query = query.offset(pagination.offset)
    if pagination.limit is not None:
        query = query.limit(pagination.limit)
    return query
