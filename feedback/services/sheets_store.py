"""
Tabular store used for the Admin Config sheet and the result worksheets.

GoogleSheetsStore talks to a spreadsheet through gspread; MemoryStore keeps
tables in process for local development and tests. Both expose the same
operations: read_range, write_range, append_rows, create_table,
clear_range and describe.
"""

import logging
import threading

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError, GSpreadException
from gspread.utils import a1_range_to_grid_range, absolute_range_name
from requests.exceptions import RequestException

from config import (
    NEW_TABLE_COLS, NEW_TABLE_ROWS, SHEETS_SCOPES, STORE_BACKEND, TOKEN_URI,
    load_store_settings,
)
from feedback.errors import ConfigurationError, TableAlreadyExists, TransientStoreError

logger = logging.getLogger(__name__)

STORE_ERRORS = (GSpreadException, GoogleAuthError, RequestException)


def describe_store_error(error):
    """Human readable hint for a failed spreadsheet call."""
    message = str(error)
    lowered = message.lower()
    if 'unable to parse range' in lowered:
        return ('Google Sheets range error. Please ensure the sheet exists '
                'and the requested columns hold data.')
    if 'not found' in lowered:
        return ('Google Sheets not found. Please check the spreadsheet ID and '
                'ensure the sheet is accessible.')
    if 'permission' in lowered or 'access' in lowered:
        return 'Google Sheets access denied. Please check the service account permissions.'
    return 'Google Sheets request failed'


class GoogleSheetsStore:
    """Spreadsheet-backed store; one worksheet per table."""

    def __init__(self, settings):
        self.settings = settings
        self._spreadsheet = None

    @property
    def spreadsheet(self):
        if self._spreadsheet is None:
            info = {
                'type': 'service_account',
                'client_email': self.settings.client_email,
                'private_key': self.settings.private_key,
                'token_uri': TOKEN_URI,
            }
            try:
                creds = Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
            except ValueError as e:
                raise ConfigurationError(
                    f'Google Sheets configuration error: GOOGLE_PRIVATE_KEY could not be parsed ({e})'
                ) from e
            client = gspread.authorize(creds)
            self._spreadsheet = self._call('open', client.open_by_key, self.settings.spreadsheet_id)
        return self._spreadsheet

    def _call(self, action, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except STORE_ERRORS as e:
            logger.error(f"Google Sheets {action} failed: {e}")
            raise TransientStoreError(describe_store_error(e), details=str(e)) from e

    def read_range(self, table, range_spec):
        result = self._call('read', self.spreadsheet.values_get, absolute_range_name(table, range_spec))
        return result.get('values', [])

    def write_range(self, table, range_spec, values):
        self._call(
            'write', self.spreadsheet.values_update,
            absolute_range_name(table, range_spec),
            params={'valueInputOption': 'RAW'},
            body={'values': values},
        )

    def append_rows(self, table, range_spec, values):
        self._call(
            'append', self.spreadsheet.values_append,
            absolute_range_name(table, range_spec),
            params={'valueInputOption': 'RAW', 'insertDataOption': 'INSERT_ROWS'},
            body={'values': values},
        )

    def create_table(self, name):
        spreadsheet = self.spreadsheet
        try:
            spreadsheet.add_worksheet(title=name, rows=NEW_TABLE_ROWS, cols=NEW_TABLE_COLS)
        except APIError as e:
            if 'already exists' in str(e).lower():
                raise TableAlreadyExists(name) from e
            logger.error(f"Google Sheets create failed for {name}: {e}")
            raise TransientStoreError(describe_store_error(e), details=str(e)) from e
        except STORE_ERRORS as e:
            logger.error(f"Google Sheets create failed for {name}: {e}")
            raise TransientStoreError(describe_store_error(e), details=str(e)) from e
        logger.info(f"Created worksheet {name}")

    def clear_range(self, table, range_spec):
        self._call('clear', self.spreadsheet.values_clear, absolute_range_name(table, range_spec))

    def describe(self):
        spreadsheet = self.spreadsheet
        worksheets = self._call('describe', spreadsheet.worksheets)
        return {'title': spreadsheet.title, 'sheetCount': len(worksheets)}


class MemoryStore:
    """In-process tables addressed with the same A1 ranges as the Sheets store."""

    def __init__(self, tables=None, title='In-memory store'):
        self.title = title
        self.tables = {name: [list(row) for row in rows] for name, rows in (tables or {}).items()}
        self._lock = threading.Lock()

    @staticmethod
    def _grid(range_spec):
        grid = a1_range_to_grid_range(range_spec)
        return (
            grid.get('startRowIndex', 0),
            grid.get('endRowIndex'),
            grid.get('startColumnIndex', 0),
            grid.get('endColumnIndex'),
        )

    def _table(self, name):
        if name not in self.tables:
            raise TransientStoreError(
                describe_store_error(f'Unable to parse range: {name}'),
                details=f'Unable to parse range: {name}',
            )
        return self.tables[name]

    @staticmethod
    def _used_rows(rows):
        count = len(rows)
        while count and not any(cell != '' for cell in rows[count - 1]):
            count -= 1
        return count

    @staticmethod
    def _place(rows, row_index, col_index, values):
        for offset, values_row in enumerate(values):
            while len(rows) <= row_index + offset:
                rows.append([])
            target = rows[row_index + offset]
            if len(target) < col_index + len(values_row):
                target.extend([''] * (col_index + len(values_row) - len(target)))
            target[col_index:col_index + len(values_row)] = [str(v) for v in values_row]

    def read_range(self, table, range_spec):
        start_row, end_row, start_col, end_col = self._grid(range_spec)
        with self._lock:
            rows = self._table(table)
            selected = []
            for row in rows[start_row:end_row]:
                cells = list(row[start_col:end_col])
                while cells and cells[-1] == '':
                    cells.pop()
                selected.append(cells)
        while selected and not selected[-1]:
            selected.pop()
        return selected

    def write_range(self, table, range_spec, values):
        start_row, _, start_col, _ = self._grid(range_spec)
        with self._lock:
            self._place(self._table(table), start_row, start_col, values)

    def append_rows(self, table, range_spec, values):
        _, _, start_col, _ = self._grid(range_spec)
        with self._lock:
            rows = self._table(table)
            self._place(rows, self._used_rows(rows), start_col, values)

    def create_table(self, name):
        with self._lock:
            if name in self.tables:
                raise TableAlreadyExists(name)
            self.tables[name] = []
        logger.info(f"Created table {name}")

    def clear_range(self, table, range_spec):
        start_row, end_row, start_col, end_col = self._grid(range_spec)
        with self._lock:
            for row in self._table(table)[start_row:end_row]:
                stop = len(row) if end_col is None else min(end_col, len(row))
                for index in range(start_col, stop):
                    row[index] = ''

    def describe(self):
        with self._lock:
            return {'title': self.title, 'sheetCount': len(self.tables)}


_memory_store = None
_memory_lock = threading.Lock()


def get_store(admin=False):
    """Store for the configured backend; the memory backend is shared process-wide."""
    global _memory_store
    if STORE_BACKEND == 'memory':
        with _memory_lock:
            if _memory_store is None:
                _memory_store = MemoryStore()
                logger.warning("Using in-memory store; data is lost when the server stops")
            return _memory_store
    return GoogleSheetsStore(load_store_settings(admin=admin))
