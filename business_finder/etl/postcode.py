"""Postcode helpers for Australian addresses."""

import re
from typing import Optional

# Four digits that are not glued to other digits or word characters.
_ADDRESS_POSTCODE = re.compile(r"\b(\d{4})\b(?![\w\d])")
_POSTCODE = re.compile(r"^\d{4}$")


def extract_postcode(address: Optional[str]) -> Optional[str]:
    """Return the first standalone 4-digit token of ``address``, if any."""
    if not address:
        return None
    match = _ADDRESS_POSTCODE.search(address)
    return match.group(1) if match else None


def is_valid_postcode(postcode: Optional[str]) -> bool:
    return bool(postcode) and bool(_POSTCODE.match(postcode))
