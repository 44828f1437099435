import random
import re

import pytest

from app.core.territories import normalize_territories
from app.services.identifiers import (
    generate_isrc,
    generate_upc,
    is_valid_upc,
    normalize_isrc,
    upc_check_digit,
)


def test_upc_check_digit_matches_known_code():
    assert upc_check_digit("03600029145") == 2
    assert is_valid_upc("036000291452")
    assert not is_valid_upc("036000291453")
    assert not is_valid_upc("03600029145")
    assert not is_valid_upc("03600029145A")


def test_generated_upc_is_valid_and_keeps_prefix():
    rng = random.Random(7)
    for _ in range(50):
        upc = generate_upc("0860", rng=rng)
        assert len(upc) == 12
        assert upc.startswith("0860")
        assert is_valid_upc(upc)


def test_generated_upc_without_prefix():
    upc = generate_upc(rng=random.Random(1))
    assert is_valid_upc(upc)


def test_generated_isrc_format():
    isrc = generate_isrc(country_code="ua", year=2025, rng=random.Random(3))
    assert re.fullmatch(r"UA-[A-Z0-9]{3}-25-\d{5}", isrc)
    assert normalize_isrc(isrc) == isrc


def test_normalize_isrc_accepts_compact_form():
    assert normalize_isrc("uaabc2512345") == "UA-ABC-25-12345"
    assert normalize_isrc(" UA-ABC-25-12345 ") == "UA-ABC-25-12345"


@pytest.mark.parametrize("isrc", ["", "UA-ABC-25-1234", "U1-ABC-25-12345", "UA-ABC-2X-12345"])
def test_normalize_isrc_rejects_malformed(isrc):
    with pytest.raises(ValueError):
        normalize_isrc(isrc)


def test_territories_are_normalized():
    assert normalize_territories(["ua", "US", "UA"]) == ["UA", "US"]
    assert normalize_territories(["US", "ww"]) == ["WW"]
    assert normalize_territories([]) == []


def test_unknown_territory_is_rejected():
    with pytest.raises(ValueError, match="ZZ"):
        normalize_territories(["UA", "ZZ"])
