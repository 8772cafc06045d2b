"""Shared query parameter parsing utilities."""


def parse_page(page: str | None) -> int:
    """Parse a 1-based page number, falling back to page 1.

    Anything that is not a positive integer (missing, blank, ``"abc"``,
    ``"0"``, ``"-2"``) yields 1.
    """
    if not page:
        return 1
    try:
        value = int(page.strip())
    except ValueError:
        return 1
    return value if value > 0 else 1
