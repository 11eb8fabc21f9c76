"""Parsing of user-entered gram amounts."""

from pe_calculator.domain.macros import validate_grams
from pe_calculator.errors import InvalidInputError


def parse_grams(raw: str | float | None, field: str) -> float:
    """Parse a gram amount typed by the user.

    Blank text means a cleared field and parses as zero. Anything that is not
    a finite, non-negative number is rejected.
    """
    if raw is None:
        raise InvalidInputError(field, raw, "missing")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            raise InvalidInputError(field, raw, "not a number") from None
        return validate_grams(field, number)
    return validate_grams(field, raw)
