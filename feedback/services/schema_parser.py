"""
Service for turning the Admin Config sheet into options and cohort schemas.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from config import OPTION_COLUMNS, REQUIRED_COLUMNS
from feedback.errors import MissingColumns, NoDataRows
from feedback.models import CohortSchema, OptionsIndex, Question, SubjectEntry
from utils import clean_cell, find_column, split_markers

logger = logging.getLogger(__name__)


def resolve_columns(header: Sequence, names: Sequence[str]) -> Dict[str, int]:
    """
    Locate each named column by case-insensitive substring match on the header.

    Raises MissingColumns listing every name that could not be found.
    """
    indexes = {name: find_column(header, name) for name in names}
    missing = [name for name, index in indexes.items() if index == -1]
    if missing:
        raise MissingColumns(missing, useStaticData=True)
    return indexes


def infer_question_columns(header: Sequence, teacher_index: int) -> List[Tuple[int, Question]]:
    """
    Every non-empty header cell after the teacher column is a question.

    Ids follow position among the question columns (question1, question2, ...),
    never the header text.
    """
    columns = []
    for index, cell in enumerate(header):
        if index <= teacher_index:
            continue
        text = clean_cell(cell)
        if not text:
            continue
        question_text, question_type, required = split_markers(text)
        question = Question(
            id=f"question{len(columns) + 1}",
            text=question_text,
            type=question_type or 'rating',
            required=required,
        )
        columns.append((index, question))
    return columns


def config_frame(raw_rows: Sequence[Sequence]) -> pd.DataFrame:
    """
    Data rows as a DataFrame of trimmed strings with positional integer columns.

    Sheets returns ragged rows (trailing empty cells are dropped), so every
    row is padded to the widest row.
    """
    width = max(len(row) for row in raw_rows)
    body = [[clean_cell(cell) for cell in row] + [''] * (width - len(row)) for row in raw_rows[1:]]
    return pd.DataFrame(body, columns=range(width), dtype=object)


def parse_options(raw_rows: Sequence[Sequence]) -> OptionsIndex:
    """
    Distinct branch / year / section values across the whole configuration table.

    Raises NoDataRows when the table has no data rows.
    """
    if not raw_rows:
        raise NoDataRows('No data found in Admin Config sheet. Please check the sheet name and data.')
    if len(raw_rows) < 2:
        raise NoDataRows('No data rows found in Admin Config sheet. Please add data after the header row.')

    indexes = resolve_columns(raw_rows[0], OPTION_COLUMNS)
    df = config_frame(raw_rows)

    def distinct(column):
        values = df[column]
        return sorted(set(values[values != '']))

    options = OptionsIndex(
        branches=distinct(indexes['branch']),
        years=distinct(indexes['year']),
        sections=distinct(indexes['section']),
    )
    logger.info(
        f"Options loaded: {len(options.branches)} branches, "
        f"{len(options.years)} years, {len(options.sections)} sections"
    )
    return options


def parse_cohort_schema(raw_rows: Sequence[Sequence], branch: str, year: str,
                        section: str) -> Optional[CohortSchema]:
    """
    Build the subject/question schema for one cohort.

    Returns None when the table is empty or no usable row matches the cohort.
    Raises MissingColumns when a required header is absent.
    """
    if not raw_rows:
        return None

    header = raw_rows[0]
    indexes = resolve_columns(header, REQUIRED_COLUMNS)
    question_columns = infer_question_columns(header, indexes['teacher'])

    if len(raw_rows) < 2:
        return None

    branch, year, section = branch.strip(), year.strip(), section.strip()
    df = config_frame(raw_rows)

    b, y, s = indexes['branch'], indexes['year'], indexes['section']
    subj, teacher = indexes['subject'], indexes['teacher']

    # Rows missing any required cell are not usable and are skipped
    mask = (
        (df[b] == branch) & (df[y] == year) & (df[s] == section)
        & (df[b] != '') & (df[y] != '') & (df[s] != '')
        & (df[subj] != '') & (df[teacher] != '')
    )
    matches = df[mask]
    if matches.empty:
        logger.info(f"No subjects found for {branch} {year} Section {section}")
        return None

    duplicates = matches[matches.duplicated(subset=[subj, teacher], keep='first')]
    if not duplicates.empty:
        logger.warning(
            f"{len(duplicates)} duplicate subject row(s) for {branch} {year} {section}: "
            f"{', '.join(duplicates[subj] + ' / ' + duplicates[teacher])}"
        )

    subjects = []
    for _, row in matches.iterrows():
        subjects.append(SubjectEntry(
            subject=row[subj],
            teacher=row[teacher],
            questions=[
                Question(q.id, q.text, q.type, q.required)
                for _, q in question_columns
            ],
        ))

    return CohortSchema(branch=branch, year=year, section=section, subjects=subjects)
