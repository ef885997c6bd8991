"""
Utils module - cell cleaning, header lookup and A1 range helpers
"""
import re

from gspread.utils import rowcol_to_a1

TYPE_MARKER = re.compile(r'\s*\[(rating|text|boolean|optional)\]\s*$', re.IGNORECASE)


def clean_cell(value):
    """Return a cell value as a trimmed string; None and NaN become ''."""
    if value is None:
        return ''
    # NaN is the only value not equal to itself
    if isinstance(value, float) and value != value:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def find_column(header, name):
    """
    Index of the first header cell containing `name` (case-insensitive), or -1.
    """
    name = name.lower()
    for index, cell in enumerate(header):
        if name in clean_cell(cell).lower():
            return index
    return -1


def column_letter(count):
    """Spreadsheet letter of the `count`-th column (1 -> A, 27 -> AA)."""
    return re.sub(r'\d+', '', rowcol_to_a1(1, max(count, 1)))


def header_range(width):
    return f"A1:{column_letter(width)}1"


def columns_range(width):
    return f"A:{column_letter(width)}"


def split_markers(header_text):
    """
    Strip trailing [type] / [optional] markers from a question header.

    Returns (text, type or None, required).
    """
    text = header_text
    question_type = None
    required = True
    while True:
        match = TYPE_MARKER.search(text)
        if not match:
            break
        marker = match.group(1).lower()
        if marker == 'optional':
            required = False
        elif question_type is None:
            question_type = marker
        text = text[:match.start()]
    return text.strip(), question_type, required


def stringify_answer(value):
    """Render a response value the way it is written to a result table."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)
