from feedback.models import SubjectFeedback


def make_feedback(branch='CSE', year='1st Year', section='A', subject='Math', teacher='Dr.X',
                  responses=None, timestamp='2024-01-31T10:00:00.000Z', registration_number='23B81A4623'):
    return SubjectFeedback(
        branch=branch,
        year=year,
        section=section,
        subject=subject,
        teacher=teacher,
        registration_number=registration_number,
        responses=dict(responses or {}),
        timestamp=timestamp,
    )
