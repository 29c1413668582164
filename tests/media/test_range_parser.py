import pytest

from audioshelf.media import ByteRange, parse_range

pytestmark = pytest.mark.media


@pytest.mark.parametrize(
    "header, expected",
    [
        ("bytes=0-99", ByteRange(0, 99)),
        ("bytes=5-", ByteRange(5, None)),
        ("bytes=10-10", ByteRange(10, 10)),
    ],
)
def test_parse_range_accepts_single_ranges(header, expected):
    assert parse_range(header) == expected


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "bytes=abc",
        "bytes=-500",
        "bytes=0-1,4-5",
        "bytes=9-3",
        "items=0-10",
        "bytes = 0-10",
    ],
)
def test_parse_range_rejects_unusable_headers(header):
    assert parse_range(header) is None


def test_resolve_clamps_end_to_file_size():
    assert ByteRange(2, 1000).resolve(10) == (2, 9)
    assert ByteRange(2).resolve(10) == (2, 9)


def test_resolve_rejects_start_past_end_of_file():
    assert ByteRange(10, 20).resolve(10) is None
    assert ByteRange(0).resolve(0) is None
