"""
Helpers for embedding raw values into PostgREST query parameters.
"""

RESERVED_CHARS = ",.:()"


def sanitize_param(param: str) -> str:
    """
    Quote a filter value if it contains a PostgREST reserved character.

    Not idempotent: apply it exactly once per raw value.

    Example:
        >>> sanitize_param("a,b")
        '"a,b"'
        >>> sanitize_param("abc")
        'abc'
    """
    if any(char in param for char in RESERVED_CHARS):
        return f'"{param}"'
    return param


def sanitize_pattern_param(pattern: str) -> str:
    """Sanitize a LIKE/ILIKE pattern, turning SQL `%` wildcards into `*`."""
    return sanitize_param(pattern.replace("%", "*"))
