import pytest

from explorer.errors import ApiError
from explorer.utils.pagination import Pagination, apply_pagination, cache_suffix, parse_pagination
from explorer.utils.validation import normalize_name, parse_id


def test_no_pagination_when_nothing_given():
    assert parse_pagination(None, None) is None
    assert parse_pagination("", " ") is None


def test_parses_limit_and_offset():
    assert parse_pagination("10", "20") == Pagination(limit=10, offset=20)


def test_offset_only():
    assert parse_pagination(None, "5") == Pagination(limit=None, offset=5)


def test_truncates_fractional_values():
    assert parse_pagination("2.9", None) == Pagination(limit=2, offset=None)


@pytest.mark.parametrize("limit,offset,message", [
    ("abc", None, "limit must be a number."),
    (None, "xyz", "offset must be a number."),
    ("0", None, "limit must be a positive number."),
    ("-3", None, "limit must be a positive number."),
    ("1001", None, "limit must be <= 1000."),
    ("10", "-1", "offset must be 0 or greater."),
])
def test_rejects_invalid_values(limit, offset, message):
    with pytest.raises(ApiError) as exc_info:
        parse_pagination(limit, offset)
    assert exc_info.value.status == 400
    assert exc_info.value.message == message


def test_accepts_maximum_limit():
    assert parse_pagination("1000", "0") == Pagination(limit=1000, offset=0)


def test_cache_suffix():
    assert cache_suffix(None) == "None:None"
    assert cache_suffix(Pagination(limit=5, offset=10)) == "5:10"


class RecordingQuery:
    def __init__(self):
        self.calls = []

    def limit(self, value):
        self.calls.append(("limit", value))
        return self

    def offset(self, value):
        self.calls.append(("offset", value))
        return self


def test_apply_pagination():
    assert apply_pagination(RecordingQuery(), None).calls == []
    query = apply_pagination(RecordingQuery(), Pagination(limit=5, offset=10))
    assert query.calls == [("offset", 10), ("limit", 5)]


@pytest.mark.parametrize("raw", ["0", "-1", "abc", "1.5", ""])
def test_parse_id_rejects_non_positive_integers(raw):
    with pytest.raises(ApiError) as exc_info:
        parse_id(raw, "folder")
    assert exc_info.value.status == 400
    assert exc_info.value.message == "Invalid folder id."


def test_parse_id():
    assert parse_id("42", "file") == 42
    assert parse_id(str(2 ** 63 - 1), "file") == 2 ** 63 - 1


def test_normalize_name():
    assert normalize_name("  Reports ", "Folder") == "Reports"
    with pytest.raises(ApiError) as exc_info:
        normalize_name("   ", "Folder")
    assert exc_info.value.message == "Folder name is required."
    with pytest.raises(ApiError):
        normalize_name(None, "File")


def test_parse_id_rejects_ids_too_large_to_store():
    with pytest.raises(ApiError) as exc_info:
        parse_id(str(2 ** 63), "folder")
    assert exc_info.value.status == 400
    assert exc_info.value.message == "Invalid folder id."


def test_rejects_offset_too_large_to_store():
    with pytest.raises(ApiError) as exc_info:
        parse_pagination(None, "99999999999999999999")
    assert exc_info.value.status == 400
    assert exc_info.value.message == f"offset must be <= {2 ** 63 - 1}."


def test_large_offsets_keep_their_precision():
    assert parse_pagination(None, str(2 ** 63 - 1)) == Pagination(offset=2 ** 63 - 1)
