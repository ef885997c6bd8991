from .schema import Question, SubjectEntry, CohortSchema, OptionsIndex, utc_timestamp
from .submission import SubjectFeedback, parse_batch

__all__ = [
    'Question', 'SubjectEntry', 'CohortSchema', 'OptionsIndex', 'utc_timestamp',
    'SubjectFeedback', 'parse_batch',
]
