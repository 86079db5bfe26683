"""
Value codec for grid cells.

Converts between the raw cell representation returned by the backend
(``None``, ``str``, ``int``/``float``, ``bool``) and the two text forms the
editor needs: the editable text shown in a cell editor, and the SQL literal
written into generated statements.

Coercion from edit text is best-effort and type-preserving, not validation:
malformed numeric input silently becomes ``0``.
"""

import logging
import math
import re
from typing import Any, Sequence, Union

from utils.sql_safety import quote_identifier, quote_string_literal

logger = logging.getLogger(__name__)

CellValue = Union[None, str, int, float, bool]

NULL_LITERAL = "NULL"

# Leading float literal, the way a lenient float parser reads "12.5kg" as 12.5
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def is_numeric(value: Any) -> bool:
    """True for int/float values; bool is not numeric here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_number(value: int | float) -> str:
    """Render a number the way the grid displays it (31.0 -> '31')."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return str(value)


def values_equal(a: CellValue, b: CellValue) -> bool:
    """
    Type-aware equality for cell values.

    ``None`` only equals ``None``, a bool never equals a number
    (``True != 1``), numbers compare numerically (``30 == 30.0``) and
    strings never equal numbers.
    """
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_numeric(a) and is_numeric(b):
        return a == b
    return type(a) is type(b) and a == b


def to_edit_text(value: CellValue) -> str:
    """
    Text placed in the cell editor when editing starts.

    Args:
        value: Current cell value

    Returns:
        Empty string for NULL, otherwise the display string
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_numeric(value):
        return format_number(value)
    return str(value)


def parse_number(text: str) -> float:
    """
    Parse the leading float literal of ``text``.

    Returns 0.0 when there is none or the result is not finite.
    """
    match = _FLOAT_PREFIX.match(text)
    if match:
        number = float(match.group(1))
        if math.isfinite(number):
            return number

    logger.debug(f"Numeric coercion fell back to 0 for input {text!r}")
    return 0.0


def from_edit_text(text: str, original_value: CellValue) -> CellValue:
    """
    Convert edited text back to a cell value, preserving the original type.

    Args:
        text: Text entered by the operator
        original_value: Value the cell held before editing

    Returns:
        ``None`` for an empty string or ``null`` (any case); a float when the
        original was numeric (``0`` if unparseable); a bool when the original
        was a bool (``True`` iff the text is ``true``, any case); otherwise
        the text unchanged.
    """
    if text == "" or text.lower() == "null":
        return None

    if is_numeric(original_value):
        return parse_number(text)

    if isinstance(original_value, bool):
        return text.lower() == "true"

    return text


def to_sql_literal(value: CellValue) -> str:
    """
    Render a cell value as a SQL literal.

    Args:
        value: Cell value

    Returns:
        ``NULL``, a single-quoted string with ``'`` doubled, ``TRUE``/``FALSE``,
        the unquoted number, or the quoted postgres spelling of NaN and
        infinities
    """
    if value is None:
        return NULL_LITERAL

    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"

    if is_numeric(value):
        if isinstance(value, float) and math.isnan(value):
            return "'NaN'"
        if isinstance(value, float) and math.isinf(value):
            return "'Infinity'" if value > 0 else "'-Infinity'"
        return format_number(value)

    if isinstance(value, str):
        return quote_string_literal(value)

    # Backends may hand back dates or decimals as other types
    return quote_string_literal(str(value))


def format_row_csv(values: Sequence[CellValue]) -> str:
    """One row as a CSV line, with NULL for null cells."""
    fields = []
    for value in values:
        if value is None:
            fields.append(NULL_LITERAL)
        elif isinstance(value, str):
            escaped = value.replace('"', '""')
            fields.append(f'"{escaped}"')
        else:
            fields.append(to_edit_text(value))
    return ",".join(fields)


def format_row_insert(
    table_name: str, column_names: Sequence[str], values: Sequence[CellValue]
) -> str:
    """One row as a standalone INSERT statement, for copying a row as SQL."""
    columns = ", ".join(quote_identifier(name) for name in column_names)
    literals = ", ".join(to_sql_literal(value) for value in values)
    return f"INSERT INTO {quote_identifier(table_name)} ({columns}) VALUES ({literals});"
