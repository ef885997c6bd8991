import os
from dataclasses import dataclass

from feedback.errors import ConfigurationError

# Spreadsheet layout
ADMIN_SHEET_NAME = 'Admin Config'
ADMIN_SHEET_RANGE = 'A:ZZ'
RESULT_TABLE_PREFIX = 'Responses_'
RESULT_FIXED_HEADERS = ['Timestamp', 'Branch', 'Year', 'Section', 'Subject', 'Teacher']

# Columns every Admin Config sheet must carry, located by header name
REQUIRED_COLUMNS = ['branch', 'year', 'section', 'subject', 'teacher']
OPTION_COLUMNS = ['branch', 'year', 'section']

# New result worksheets
NEW_TABLE_ROWS = 1000
NEW_TABLE_COLS = 26

# Store backend: 'sheets' (Google Sheets) or 'memory' (local development)
STORE_BACKEND = os.environ.get('FEEDBACK_STORE_BACKEND', 'sheets').strip().lower()

SHEETS_SCOPES = ['https://www.googleapis.com/auth/spreadsheets']
TOKEN_URI = 'https://oauth2.googleapis.com/token'

# Upload configuration
UPLOAD_FOLDER = 'uploads'
ALLOWED_EXTENSIONS = {'xlsx'}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

# Fallback questions offered when no cohort configuration is found
FEEDBACK_QUESTIONS = [
    "How is the faculty's approach?",
    "How has the faculty prepared for the classes?",
    "Does the faculty inform you about your expected competencies, course outcomes?",
    "How often does the faculty illustrate the concepts through examples and practical applications?",
    "Whether faculty covers syllabus in time?",
    "Do you agree that the faculty teaches content beyond syllabus?",
    "How does the faculty communicate?",
    "Does the faculty encourage students to ask questions?",
    "How well does the faculty use the teaching aids?",
    "How would you rate the overall teaching quality?",
]


@dataclass(frozen=True)
class StoreSettings:
    client_email: str
    private_key: str
    spreadsheet_id: str


def _env(name, admin_name=None):
    value = os.environ.get(admin_name) if admin_name else None
    if not value:
        value = os.environ.get(name)
    return value.strip() if value else None


def load_store_settings(admin=False):
    """
    Read the service credential and spreadsheet id from the environment.

    The admin variant prefers the GOOGLE_ADMIN_* variables and falls back to
    the regular ones. Raises ConfigurationError naming the first missing variable.
    """
    client_email = _env('GOOGLE_CLIENT_EMAIL', 'GOOGLE_ADMIN_CLIENT_EMAIL' if admin else None)
    private_key = _env('GOOGLE_PRIVATE_KEY', 'GOOGLE_ADMIN_PRIVATE_KEY' if admin else None)
    spreadsheet_id = _env('GOOGLE_SPREADSHEET_ID', 'GOOGLE_ADMIN_SPREADSHEET_ID' if admin else None)

    if not client_email:
        raise ConfigurationError(
            'Google Sheets configuration error: GOOGLE_CLIENT_EMAIL is not set (client email not configured)'
        )
    if not private_key:
        raise ConfigurationError(
            'Google Sheets configuration error: GOOGLE_PRIVATE_KEY is not set (private key not configured)'
        )
    if not spreadsheet_id:
        raise ConfigurationError(
            'Google Sheets configuration error: GOOGLE_SPREADSHEET_ID is not set (spreadsheet ID not configured)'
        )

    return StoreSettings(
        client_email=client_email,
        private_key=private_key.replace('\\n', '\n'),
        spreadsheet_id=spreadsheet_id,
    )
