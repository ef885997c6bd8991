"""
End-to-end submission: validate, group by cohort, write each cohort.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from feedback.errors import EmptyBatch, FeedbackError
from feedback.services.aggregator import group_by_cohort
from feedback.services.result_writer import ResultTableWriter

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    succeeded: List[Dict] = field(default_factory=list)
    failed: List[Dict] = field(default_factory=list)

    @property
    def cohorts_processed(self):
        return len(self.succeeded)

    @property
    def status_code(self):
        if not self.failed:
            return 200
        if self.succeeded:
            return 207
        return 500

    def to_dict(self):
        if not self.failed:
            message = 'Enhanced feedback submitted successfully'
        elif self.succeeded:
            message = 'Enhanced feedback partially submitted'
        else:
            message = 'Failed to submit enhanced feedback'
        body = {
            'message': message,
            'cohortsProcessed': self.cohorts_processed,
            'succeeded': self.succeeded,
            'failed': self.failed,
        }
        if not self.succeeded:
            body['error'] = message
        return body


def submit_batch(store, batch):
    """
    Write a batch of SubjectFeedback to the per-cohort result tables.

    Raises EmptyBatch before touching the store. Each cohort is written
    independently; one cohort failing does not stop the others.
    """
    if not batch:
        raise EmptyBatch()

    groups = group_by_cohort(batch)
    writer = ResultTableWriter(store)
    result = SubmissionResult()

    for cohort_key, group in groups.items():
        try:
            table, row_count = writer.write_cohort(cohort_key, group)
        except FeedbackError as e:
            logger.error(f"Failed to write cohort {cohort_key}: {e}")
            result.failed.append({'cohort': cohort_key, 'error': e.message})
            continue
        result.succeeded.append({'cohort': cohort_key, 'table': table, 'rows': row_count})

    logger.info(
        f"Submission processed: {len(result.succeeded)} cohort(s) written, "
        f"{len(result.failed)} failed"
    )
    return result
