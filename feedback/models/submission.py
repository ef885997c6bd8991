from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from feedback.errors import ValidationError

Answer = Union[str, int, float, bool]

FIXED_FIELDS = ('branch', 'year', 'section', 'subject', 'teacher')


@dataclass
class SubjectFeedback:
    """One student's answers for one subject of a cohort."""
    branch: str
    year: str
    section: str
    subject: str
    teacher: str
    registration_number: str = ''
    responses: Dict[str, Answer] = field(default_factory=dict)
    timestamp: Optional[str] = None

    @property
    def cohort_key(self):
        return f"{self.branch}_{self.year}_{self.section}"

    @classmethod
    def from_dict(cls, data, index=0):
        if not isinstance(data, dict):
            raise ValidationError(f"Feedback item {index} must be an object")

        values = {}
        for name in FIXED_FIELDS:
            value = data.get(name)
            if value is None:
                raise ValidationError(f"Feedback item {index} is missing '{name}'")
            values[name] = str(value).strip()

        responses = data.get('responses') or {}
        if not isinstance(responses, dict):
            raise ValidationError(f"Feedback item {index} has invalid 'responses'")

        return cls(
            registration_number=str(data.get('registrationNumber') or '').strip(),
            responses=dict(responses),
            timestamp=data.get('timestamp') or None,
            **values,
        )


def parse_batch(payload) -> List[SubjectFeedback]:
    """Turn a decoded JSON request body into SubjectFeedback items."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValidationError('Feedback payload must be a list of subject feedback objects')
    return [SubjectFeedback.from_dict(item, index) for index, item in enumerate(payload)]
