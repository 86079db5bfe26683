"""
SQL text helpers shared by statement synthesis and paging.

Identifiers come from introspected schema metadata, never from operator
text, so quoting wraps them in double quotes without further escaping.
"""


def quote_identifier(identifier: str) -> str:
    """
    Double-quote a table or column name.

    Args:
        identifier: Table or column name as reported by the backend

    Returns:
        The identifier wrapped in double quotes

    Raises:
        ValueError: If the identifier is empty or not a string
    """
    if not isinstance(identifier, str) or not identifier:
        raise ValueError(f"SQL identifier must be a non-empty string, got {identifier!r}")

    return f'"{identifier}"'


def quote_string_literal(text: str) -> str:
    """Single-quote a string, doubling embedded single quotes."""
    escaped = text.replace("'", "''")
    return f"'{escaped}'"


def validate_integer_param(value: int, param_name: str, min_value: int = 0) -> None:
    """
    Validate an integer parameter for paging (offset, limit).

    Args:
        value: The value to validate
        param_name: Name of the parameter (for error messages)
        min_value: Minimum allowed value (default 0)

    Raises:
        ValueError: If the value is not an integer or below minimum
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Invalid {param_name}: {value!r}. Must be an integer.")

    if value < min_value:
        raise ValueError(f"Invalid {param_name}: {value}. Must be >= {min_value}.")
