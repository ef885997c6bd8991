import logging

from flask import Blueprint, request, jsonify

from config import ADMIN_SHEET_NAME, ADMIN_SHEET_RANGE, FEEDBACK_QUESTIONS
from feedback.errors import EmptyBatch, TransientStoreError, ValidationError
from feedback.models import Question, parse_batch
from feedback.services.schema_parser import parse_cohort_schema, parse_options
from feedback.services.submission_service import submit_batch
from routes import store_for

logger = logging.getLogger(__name__)

student_bp = Blueprint('student', __name__, url_prefix='/api')


def default_questions():
    """Built-in question set the form falls back to when no cohort configuration exists."""
    return [
        Question(id=f"question{number}", text=text).to_dict()
        for number, text in enumerate(FEEDBACK_QUESTIONS, start=1)
    ]


@student_bp.route('/get-options', methods=['GET'])
def get_options():
    """Branches, years and sections available in the Admin Config sheet."""
    store = store_for()
    logger.info("Fetching options from Admin Config sheet")
    rows = store.read_range(ADMIN_SHEET_NAME, ADMIN_SHEET_RANGE)
    options = parse_options(rows)
    return jsonify(options.to_dict())


@student_bp.route('/admin-config', methods=['GET'])
def admin_config():
    """Subjects and questions configured for one branch/year/section."""
    branch = request.args.get('branch', '').strip()
    year = request.args.get('year', '').strip()
    section = request.args.get('section', '').strip()

    if not branch or not year or not section:
        raise ValidationError('Missing required parameters: branch, year, section')

    store = store_for(admin=True)
    try:
        rows = store.read_range(ADMIN_SHEET_NAME, ADMIN_SHEET_RANGE)
    except TransientStoreError as e:
        e.payload['useStaticData'] = True
        raise

    schema = parse_cohort_schema(rows, branch, year, section)
    if schema is None:
        return jsonify({
            'error': f'No subjects found for {branch} {year} Section {section}',
            'useStaticData': True,
            'defaultQuestions': default_questions(),
        }), 404

    logger.info(f"Loaded {len(schema.subjects)} subjects for {branch} {year} {section}")
    return jsonify(schema.to_dict())


@student_bp.route('/submit-enhanced-feedback', methods=['POST'])
def submit_enhanced_feedback():
    """Append a student's per-subject feedback to the cohort result tables."""
    batch = parse_batch(request.get_json(silent=True))
    if not batch:
        raise EmptyBatch()

    result = submit_batch(store_for(), batch)
    return jsonify(result.to_dict()), result.status_code
