from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

QUESTION_TYPES = ('rating', 'text', 'boolean')


def utc_timestamp():
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-31T10:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class Question:
    id: str
    text: str
    type: str = 'rating'
    required: bool = True

    def to_dict(self):
        return {'id': self.id, 'text': self.text, 'type': self.type, 'required': self.required}


@dataclass
class SubjectEntry:
    subject: str
    teacher: str
    questions: List[Question] = field(default_factory=list)

    def to_dict(self):
        return {
            'subject': self.subject,
            'teacher': self.teacher,
            'questions': [q.to_dict() for q in self.questions],
        }


@dataclass
class CohortSchema:
    branch: str
    year: str
    section: str
    subjects: List[SubjectEntry] = field(default_factory=list)
    last_updated: str = field(default_factory=utc_timestamp)

    def to_dict(self):
        return {
            'branch': self.branch,
            'year': self.year,
            'section': self.section,
            'subjects': [s.to_dict() for s in self.subjects],
            'lastUpdated': self.last_updated,
        }


@dataclass
class OptionsIndex:
    branches: List[str] = field(default_factory=list)
    years: List[str] = field(default_factory=list)
    sections: List[str] = field(default_factory=list)

    def to_dict(self):
        return {'branches': self.branches, 'years': self.years, 'sections': self.sections}
