import unittest
from unittest import mock

from feedback.errors import TransientStoreError
from feedback.services.result_writer import ResultTableWriter, reconcile_headers
from feedback.services.sheets_store import MemoryStore
from tests.helpers import make_feedback

FIXED = ['Timestamp', 'Branch', 'Year', 'Section', 'Subject', 'Teacher']
TABLE = 'Responses_CSE_1st Year_A'


class EnsureTableTest(unittest.TestCase):
    def test_second_call_does_not_raise(self):
        writer = ResultTableWriter(MemoryStore())
        self.assertTrue(writer.ensure_table(TABLE))
        self.assertFalse(writer.ensure_table(TABLE))

    def test_other_failures_are_logged_not_raised(self):
        store = MemoryStore()
        with mock.patch.object(store, 'create_table', side_effect=TransientStoreError('quota')):
            with self.assertLogs('feedback.services.result_writer', level='WARNING'):
                self.assertFalse(ResultTableWriter(store).ensure_table(TABLE))


class ReconcileHeadersTest(unittest.TestCase):
    def test_new_table_uses_batch_header(self):
        self.assertEqual(reconcile_headers([], ['question1']), FIXED + ['question1'])

    def test_widens_without_moving_columns(self):
        existing = FIXED + ['question2']
        self.assertEqual(
            reconcile_headers(existing, ['question1', 'question2', 'question3']),
            FIXED + ['question2', 'question1', 'question3'],
        )

    def test_unchanged_when_covered(self):
        existing = FIXED + ['question1', 'question2']
        self.assertEqual(reconcile_headers(existing, ['question2']), existing)


class WriteCohortTest(unittest.TestCase):
    def test_creates_table_with_header_and_row(self):
        store = MemoryStore()
        name, count = ResultTableWriter(store).write_cohort(
            'CSE_1st Year_A', [make_feedback(responses={'question1': 8}, timestamp='T')]
        )
        self.assertEqual((name, count), (TABLE, 1))
        self.assertEqual(store.tables[TABLE], [
            FIXED + ['question1'],
            ['T', 'CSE', '1st Year', 'A', 'Math', 'Dr.X', '8'],
        ])

    def test_reuses_existing_table(self):
        store = MemoryStore()
        writer = ResultTableWriter(store)
        writer.write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 8}, timestamp='T1')])
        writer.write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 6}, timestamp='T2')])

        rows = store.tables[TABLE]
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0], FIXED + ['question1'])
        self.assertEqual(rows[2][0], 'T2')

    def test_header_is_widened_for_new_questions(self):
        store = MemoryStore(tables={TABLE: [
            FIXED + ['question2'],
            ['T0', 'CSE', '1st Year', 'A', 'Math', 'Dr.X', '4'],
        ]})
        ResultTableWriter(store).write_cohort(
            'CSE_1st Year_A', [make_feedback(responses={'question1': 5, 'question2': 3}, timestamp='T1')]
        )
        rows = store.tables[TABLE]
        self.assertEqual(rows[0], FIXED + ['question2', 'question1'])
        self.assertEqual(rows[1][6:], ['4'])
        self.assertEqual(rows[2][6:], ['3', '5'])

    def test_header_read_failure_falls_back_to_batch_header(self):
        store = MemoryStore(tables={TABLE: [FIXED + ['question9']]})
        with mock.patch.object(store, 'read_range', side_effect=TransientStoreError('timeout')):
            ResultTableWriter(store).write_cohort(
                'CSE_1st Year_A', [make_feedback(responses={'question1': 2}, timestamp='T')]
            )
        rows = store.tables[TABLE]
        self.assertEqual(rows[0], FIXED + ['question9'])
        self.assertEqual(rows[1], ['T', 'CSE', '1st Year', 'A', 'Math', 'Dr.X', '2'])

    def test_creation_failure_still_appends(self):
        store = MemoryStore(tables={TABLE: []})
        with mock.patch.object(store, 'create_table', side_effect=TransientStoreError('quota')):
            ResultTableWriter(store).write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 1})])
        self.assertEqual(len(store.tables[TABLE]), 2)

    def test_header_write_failure_still_appends(self):
        store = MemoryStore()
        with mock.patch.object(store, 'write_range', side_effect=TransientStoreError('quota')):
            ResultTableWriter(store).write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 1})])
        self.assertEqual(len(store.tables[TABLE]), 1)

    def test_append_failure_propagates(self):
        store = MemoryStore()
        with mock.patch.object(store, 'append_rows', side_effect=TransientStoreError('quota')):
            with self.assertRaises(TransientStoreError):
                ResultTableWriter(store).write_cohort('CSE_1st Year_A', [make_feedback()])

    def test_header_replaced_by_concurrent_writer_is_widened_again(self):
        store = MemoryStore(tables={TABLE: []})
        writer = ResultTableWriter(store)
        # Another writer puts its own header in row 1 right after ours lands
        with mock.patch.object(writer, 'read_header', side_effect=[[], FIXED + ['question2']]):
            writer.write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 5}, timestamp='T')])

        rows = store.tables[TABLE]
        self.assertEqual(rows[0], FIXED + ['question2', 'question1'])
        self.assertEqual(rows[1][6:], ['', '5'])

    def test_header_reread_failure_keeps_written_header(self):
        store = MemoryStore(tables={TABLE: []})
        writer = ResultTableWriter(store)
        with mock.patch.object(writer, 'read_header', side_effect=[[], TransientStoreError('timeout')]):
            with self.assertLogs('feedback.services.result_writer', level='WARNING'):
                writer.write_cohort('CSE_1st Year_A', [make_feedback(responses={'question1': 5}, timestamp='T')])
        self.assertEqual(store.tables[TABLE][0], FIXED + ['question1'])

    def test_header_range_past_column_z(self):
        store = MemoryStore()
        responses = {f"question{n:02d}": n for n in range(1, 26)}
        with mock.patch.object(store, 'write_range', wraps=store.write_range) as write_range:
            ResultTableWriter(store).write_cohort('CSE_1st Year_A', [make_feedback(responses=responses)])
        self.assertEqual(write_range.call_args[0][1], 'A1:AE1')


if __name__ == '__main__':
    unittest.main()
