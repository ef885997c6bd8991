"""
Service for loading an Admin Config workbook (.xlsx) into the configuration sheet.
"""

import logging
from typing import List, Tuple

import pandas as pd

from config import ADMIN_SHEET_NAME, REQUIRED_COLUMNS
from feedback.errors import FeedbackError, MissingColumns, SchemaError, TableAlreadyExists
from feedback.services.schema_parser import infer_question_columns, resolve_columns
from utils import clean_cell, column_letter, columns_range

logger = logging.getLogger(__name__)

LAST_COLUMN_INDEX = 702  # ZZ


def validate_config_excel(file_path: str) -> Tuple[bool, str, List[List[str]]]:
    """
    Validate an uploaded configuration workbook.

    Returns:
        Tuple of (is_valid, error_message, rows) where rows is the header
        followed by every usable data row, all cells as trimmed strings.
    """
    try:
        df = pd.read_excel(file_path, header=None, dtype=object)
    except Exception as e:
        logger.error(f"Error reading configuration Excel file: {e}")
        return False, f"Error reading Excel file: {str(e)}", []

    if df.empty:
        return False, "Excel file is empty", []

    rows = [[clean_cell(cell) for cell in row] for row in df.itertuples(index=False)]
    header = rows[0]

    try:
        indexes = resolve_columns(header, REQUIRED_COLUMNS)
    except MissingColumns as e:
        return False, f"{e.message}. Required: {', '.join(c.title() for c in REQUIRED_COLUMNS)}", []

    usable = [
        row for row in rows[1:]
        if all(row[index] for index in indexes.values())
    ]
    if not usable:
        return False, "No valid configuration rows found after cleaning", []

    logger.info(f"Validated configuration workbook: {len(usable)} usable rows, {len(header)} columns")
    return True, "", [header] + usable


def _align_rows(stored_header, header, data_rows):
    """
    Lay uploaded rows out in the column order of the stored header.

    Required columns are matched with the header lookup rule; every other
    uploaded column must appear in the stored header under the same text.
    Raises SchemaError when the two headers cannot be matched.
    """
    try:
        stored_required = resolve_columns(stored_header, REQUIRED_COLUMNS)
    except MissingColumns as e:
        raise SchemaError(f"Existing {ADMIN_SHEET_NAME} header is unusable: {e.message}") from e
    uploaded_required = resolve_columns(header, REQUIRED_COLUMNS)

    targets = {uploaded_required[name]: stored_required[name] for name in REQUIRED_COLUMNS}
    stored_text = {
        clean_cell(cell).lower(): index for index, cell in enumerate(stored_header)
        if clean_cell(cell) and index not in stored_required.values()
    }
    unknown = []
    for index, cell in enumerate(header):
        if index in targets or not cell:
            continue
        if cell.lower() in stored_text:
            targets[index] = stored_text[cell.lower()]
        else:
            unknown.append(cell)
    if unknown:
        raise SchemaError(
            f"Uploaded columns not present in {ADMIN_SHEET_NAME}: {', '.join(unknown)}. "
            f"Use replace mode to change the sheet layout"
        )

    aligned = []
    for row in data_rows:
        target_row = [''] * len(stored_header)
        for source, target in targets.items():
            if source < len(row):
                target_row[target] = row[source]
        aligned.append(target_row)
    return aligned


def process_config_excel(store, file_path: str, replace_existing: bool = True) -> Tuple[bool, str, dict]:
    """
    Load a validated workbook into the Admin Config sheet.

    Args:
        store: tabular store holding the Admin Config sheet
        file_path: Path to the Excel file
        replace_existing: If True, overwrite the sheet with header plus rows and
            clear what lies beyond them; otherwise append the data rows below
            the existing ones, laid out in the stored column order

    Returns:
        Tuple of (success, message, stats_dict)
    """
    is_valid, error_msg, rows = validate_config_excel(file_path)
    if not is_valid:
        return False, error_msg, {}

    header, data_rows = rows[0], rows[1:]
    width = max(len(row) for row in rows)

    try:
        try:
            store.create_table(ADMIN_SHEET_NAME)
        except TableAlreadyExists:
            pass

        if replace_existing:
            # Overwrite in place, then clear whatever the old sheet held beyond the new block
            store.write_range(ADMIN_SHEET_NAME, f"A1:{column_letter(width)}{len(rows)}", rows)
            store.clear_range(ADMIN_SHEET_NAME, f"A{len(rows) + 1}:ZZ")
            if width < LAST_COLUMN_INDEX:
                store.clear_range(ADMIN_SHEET_NAME, f"{column_letter(width + 1)}1:ZZ{len(rows)}")
        else:
            existing = store.read_range(ADMIN_SHEET_NAME, '1:1')
            if existing and existing[0]:
                stored_header = existing[0]
                data_rows = _align_rows(stored_header, header, data_rows)
                width = len(stored_header)
            else:
                store.write_range(ADMIN_SHEET_NAME, f"A1:{column_letter(len(header))}1", [header])
            store.append_rows(ADMIN_SHEET_NAME, columns_range(width), data_rows)
    except SchemaError as e:
        logger.warning(f"Rejected configuration upload: {e.message}")
        return False, e.message, {}
    except FeedbackError as e:
        logger.error(f"Error writing configuration to {ADMIN_SHEET_NAME}: {e}")
        return False, f"Error writing configuration: {e.message}", {}

    teacher_index = resolve_columns(header, REQUIRED_COLUMNS)['teacher']
    stats = {
        'rows': len(data_rows),
        'questions': len(infer_question_columns(header, teacher_index)),
        'replaced': replace_existing,
    }
    action = 'Replaced' if replace_existing else 'Appended'
    return True, f"{action} {len(data_rows)} configuration rows in {ADMIN_SHEET_NAME}.", stats


def create_sample_config_excel(output_path: str = 'sample_admin_config.xlsx'):
    """
    Create a sample workbook laid out like the Admin Config sheet.
    """
    sample_data = {
        'Branch': ['CSE', 'CSE', 'ECE'],
        'Year': ['1st Year', '1st Year', '2nd Year'],
        'Section': ['A', 'A', 'B'],
        'Subject': ['Mathematics', 'Physics', 'Signals and Systems'],
        'Teacher': ['Dr. John Doe', 'Prof. Jane Smith', 'Dr. Robert Brown'],
        'How well does the teacher explain concepts?': ['', '', ''],
        'Is the teacher punctual?': ['', '', ''],
        'Any other comments? [text] [optional]': ['', '', ''],
    }

    df = pd.DataFrame(sample_data)
    df.to_excel(output_path, index=False)
    logger.info(f"Sample configuration Excel file created: {output_path}")
    return output_path
