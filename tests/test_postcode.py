import pytest

from business_finder.etl.postcode import extract_postcode, is_valid_postcode


@pytest.mark.parametrize(
    "address, expected",
    [
        ("12 Main St, Sydney NSW 2000", "2000"),
        ("Shop 3/45 Smith St, Fitzroy VIC 3065, Australia", "3065"),
        ("12 Main St, Sydney", None),
        ("Unit 12345 Long Rd", None),
        ("Lot 2000a Rural Rd", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_postcode(address, expected):
    assert extract_postcode(address) == expected


def test_extract_postcode_takes_first_standalone_token():
    assert extract_postcode("1200 Pacific Hwy, Pymble NSW 2073") == "1200"


def test_is_valid_postcode():
    assert is_valid_postcode("3000")
    assert not is_valid_postcode("300")
    assert not is_valid_postcode("30000")
    assert not is_valid_postcode("30a0")
    assert not is_valid_postcode(None)
