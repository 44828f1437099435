import datetime
import random
import re
import string
from typing import Optional

from app.core.config import settings

_ISRC_RE = re.compile(r"^([A-Z]{2})-?([A-Z0-9]{3})-?(\d{2})-?(\d{5})$")
_REGISTRANT_CHARS = string.ascii_uppercase + string.digits


def upc_check_digit(payload: str) -> int:
    """Check digit for the first 11 digits of a UPC-A code."""
    odd_sum = sum(int(d) for d in payload[0::2])
    even_sum = sum(int(d) for d in payload[1::2])
    return (10 - ((odd_sum * 3 + even_sum) % 10)) % 10


def generate_upc(prefix: Optional[str] = None, rng: random.Random = random) -> str:
    """
    Builds a 12-digit UPC. An artist's prefix fills the leading digits; the rest
    of the 11-digit payload is random and the last digit is the check digit.
    """
    prefix = "".join(ch for ch in (prefix or "") if ch.isdigit())[:11]
    if not prefix:
        prefix = str(rng.randint(0, 9))
    payload = prefix + "".join(str(rng.randint(0, 9)) for _ in range(11 - len(prefix)))
    return payload + str(upc_check_digit(payload))


def is_valid_upc(upc: str) -> bool:
    if not upc or len(upc) != 12 or not upc.isdigit():
        return False
    return upc_check_digit(upc[:11]) == int(upc[11])


def generate_isrc(country_code: Optional[str] = None, year: Optional[int] = None, rng: random.Random = random) -> str:
    country_code = (country_code or settings.ISRC_COUNTRY_CODE).upper()
    registrant = "".join(rng.choice(_REGISTRANT_CHARS) for _ in range(3))
    year = year or datetime.date.today().year
    designation = f"{rng.randint(0, 99999):05d}"
    return f"{country_code}-{registrant}-{year % 100:02d}-{designation}"


def normalize_isrc(isrc: str) -> str:
    """Returns the hyphenated form of a valid ISRC; raises ValueError otherwise."""
    match = _ISRC_RE.match(isrc.strip().upper())
    if not match:
        raise ValueError(f"Invalid ISRC '{isrc}'")
    return "-".join(match.groups())
