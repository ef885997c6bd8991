from flask import Blueprint, request, jsonify, send_file
from werkzeug.utils import secure_filename
import os
import logging

from config import ADMIN_SHEET_NAME, UPLOAD_FOLDER, ALLOWED_EXTENSIONS, MAX_FILE_SIZE
from feedback.errors import FeedbackError
from feedback.services.config_upload import process_config_excel, create_sample_config_excel
from routes import store_for

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api')


def allowed_file(filename):
    """Check if file has an allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


@admin_bp.route('/test-connection', methods=['GET'])
def test_connection():
    """Verify credentials, spreadsheet access and the Admin Config sheet."""
    logger.info("Testing Google Sheets connection...")
    try:
        store = store_for()
        info = store.describe()
        rows = store.read_range(ADMIN_SHEET_NAME, 'A1:C2')
    except FeedbackError as e:
        logger.error(f"Google Sheets connection test failed: {e}")
        return jsonify({
            'success': False,
            'error': 'Google Sheets connection failed',
            'details': e.message,
        }), 500

    return jsonify({
        'success': True,
        'message': 'Google Sheets connection successful',
        'spreadsheetTitle': info['title'],
        'sheetCount': info['sheetCount'],
        'adminConfigData': {
            'hasData': bool(rows),
            'rowCount': len(rows),
            'firstRow': rows[0] if rows else None,
        },
    })


@admin_bp.route('/admin-config/upload', methods=['POST'])
def upload_config_excel():
    """Load the Admin Config sheet from an uploaded Excel workbook."""
    if 'file' not in request.files:
        return jsonify({
            'success': False,
            'message': 'No file uploaded'
        }), 400

    file = request.files['file']

    if file.filename == '':
        return jsonify({
            'success': False,
            'message': 'No file selected'
        }), 400

    if not allowed_file(file.filename):
        return jsonify({
            'success': False,
            'message': 'Invalid file type. Please upload an Excel workbook (.xlsx)'
        }), 400

    # Check file size
    file.seek(0, os.SEEK_END)
    file_size = file.tell()
    file.seek(0)

    if file_size > MAX_FILE_SIZE:
        return jsonify({
            'success': False,
            'message': f'File too large. Maximum size is {MAX_FILE_SIZE / (1024*1024):.0f}MB'
        }), 400

    replace_existing = request.form.get('mode', 'replace').strip().lower() != 'append'
    store = store_for(admin=True)

    os.makedirs(UPLOAD_FOLDER, exist_ok=True)
    filename = secure_filename(file.filename)
    filepath = os.path.join(UPLOAD_FOLDER, filename)
    file.save(filepath)

    try:
        success, message, stats = process_config_excel(store, filepath, replace_existing=replace_existing)
    finally:
        try:
            os.remove(filepath)
        except OSError as e:
            logger.warning(f"Could not remove uploaded file {filepath}: {e}")

    return jsonify({
        'success': success,
        'message': message,
        'stats': stats
    }), 200 if success else 400


@admin_bp.route('/admin-config/sample', methods=['GET'])
def download_sample():
    """Download a sample Admin Config workbook."""
    os.makedirs(UPLOAD_FOLDER, exist_ok=True)
    sample_path = os.path.abspath(os.path.join(UPLOAD_FOLDER, 'sample_admin_config.xlsx'))
    create_sample_config_excel(sample_path)
    return send_file(sample_path, as_attachment=True, download_name='sample_admin_config.xlsx')
