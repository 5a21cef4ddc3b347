"""Exceptions shared by the search and query flows."""

from typing import Dict


class ValidationError(ValueError):
    """Raised when request parameters are missing or malformed."""

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors


class BusinessNotFound(LookupError):
    """Raised when a business id does not exist in the store."""

    def __init__(self, business_id: int) -> None:
        super().__init__(f"business {business_id} not found")
        self.business_id = business_id
