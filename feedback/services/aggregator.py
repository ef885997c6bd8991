"""
Grouping of subject feedback into per-cohort result table batches.
"""

from typing import Dict, List, Sequence

from config import RESULT_FIXED_HEADERS, RESULT_TABLE_PREFIX
from feedback.models import SubjectFeedback, utc_timestamp
from utils import stringify_answer


def group_by_cohort(batch: Sequence[SubjectFeedback]) -> Dict[str, List[SubjectFeedback]]:
    """Group feedback by branch_year_section, keeping first-seen order."""
    groups: Dict[str, List[SubjectFeedback]] = {}
    for feedback in batch:
        groups.setdefault(feedback.cohort_key, []).append(feedback)
    return groups


def build_result_table_name(cohort_key: str) -> str:
    return f"{RESULT_TABLE_PREFIX}{cohort_key}"


def collect_question_ids(group: Sequence[SubjectFeedback]) -> List[str]:
    """Sorted union of every question id answered anywhere in the group."""
    question_ids = set()
    for feedback in group:
        question_ids.update(feedback.responses.keys())
    return sorted(question_ids)


def build_headers(question_ids: Sequence[str]) -> List[str]:
    return RESULT_FIXED_HEADERS + list(question_ids)


def build_rows(group: Sequence[SubjectFeedback], question_ids: Sequence[str]) -> List[List[str]]:
    """
    One row per feedback item, answers laid out in `question_ids` order.

    A question the item did not answer becomes an empty cell.
    """
    rows = []
    for feedback in group:
        row = [
            feedback.timestamp or utc_timestamp(),
            feedback.branch,
            feedback.year,
            feedback.section,
            feedback.subject,
            feedback.teacher,
        ]
        row.extend(stringify_answer(feedback.responses.get(qid)) for qid in question_ids)
        rows.append(row)
    return rows
