"""
Idempotent create-then-append writer for per-cohort result tables.
"""

import logging
from typing import List, Sequence

from config import RESULT_FIXED_HEADERS
from feedback.errors import TableAlreadyExists
from feedback.services.aggregator import (
    build_headers, build_result_table_name, build_rows, collect_question_ids,
)
from utils import clean_cell, columns_range, header_range

logger = logging.getLogger(__name__)


def reconcile_headers(existing: Sequence[str], question_ids: Sequence[str]) -> List[str]:
    """
    Header to write rows against: the stored header widened with any
    question ids it does not carry yet. Existing columns never move.
    """
    if not existing:
        return build_headers(question_ids)
    merged = list(existing)
    merged.extend(qid for qid in question_ids if qid not in merged)
    return merged


class ResultTableWriter:
    def __init__(self, store):
        self.store = store

    def ensure_table(self, name):
        """
        Create the table if needed. Returns True when this call created it.

        An existing table is not an error. Any other creation failure is
        logged and the caller still goes on to append.
        """
        try:
            self.store.create_table(name)
            return True
        except TableAlreadyExists:
            logger.debug(f"{name} already exists")
            return False
        except Exception as e:
            logger.warning(f"Could not create {name}, appending anyway: {e}")
            return False

    def read_header(self, name):
        rows = self.store.read_range(name, '1:1')
        return [clean_cell(cell) for cell in rows[0]] if rows else []

    def write_header(self, name, headers):
        self.store.write_range(name, header_range(len(headers)), [list(headers)])

    def append_rows(self, name, rows, width):
        self.store.append_rows(name, columns_range(width), rows)

    def resolve_headers(self, name, question_ids, created):
        """
        Work out the header for this batch and write it when it changed.

        Reading and writing the header are best-effort; on a failed read the
        batch's own header is used and the stored one is left untouched.
        """
        batch_headers = build_headers(question_ids)
        existing = []
        if not created:
            try:
                existing = self.read_header(name)
            except Exception as e:
                logger.warning(f"Could not read header of {name}, using batch header: {e}")
                return batch_headers

        if existing and existing[:len(RESULT_FIXED_HEADERS)] != RESULT_FIXED_HEADERS:
            logger.warning(f"Unexpected header in {name}: {existing}; using batch header")
            return batch_headers

        headers = reconcile_headers(existing, question_ids)
        if headers != existing:
            try:
                self.write_header(name, headers)
                if existing:
                    logger.info(f"Widened header of {name} with {len(headers) - len(existing)} column(s)")
            except Exception as e:
                logger.warning(f"Could not write header of {name}: {e}")
                return headers
            return self.confirm_header(name, headers, question_ids)
        return headers

    def confirm_header(self, name, headers, question_ids):
        """
        Re-read the header just written and widen it again when another
        writer replaced it in between.

        Two writers that both pass this check at the same moment can still
        leave a column missing from row 1; rows are laid out against the
        returned header either way.
        """
        try:
            stored = self.read_header(name)
        except Exception as e:
            logger.warning(f"Could not re-read header of {name}: {e}")
            return headers

        if stored == list(headers) or stored[:len(RESULT_FIXED_HEADERS)] != RESULT_FIXED_HEADERS:
            return headers

        merged = reconcile_headers(stored, question_ids)
        logger.warning(f"Header of {name} changed while writing; continuing with {merged}")
        if merged != stored:
            try:
                self.write_header(name, merged)
            except Exception as e:
                logger.warning(f"Could not write header of {name}: {e}")
        return merged

    def write_cohort(self, cohort_key, group):
        """
        Persist one cohort's feedback. Append failures propagate.

        Returns (table name, number of rows appended).
        """
        name = build_result_table_name(cohort_key)
        question_ids = collect_question_ids(group)

        created = self.ensure_table(name)
        headers = self.resolve_headers(name, question_ids, created)
        rows = build_rows(group, headers[len(RESULT_FIXED_HEADERS):])

        self.append_rows(name, rows, len(headers))
        logger.info(f"Appended {len(rows)} row(s) to {name}")
        return name, len(rows)
