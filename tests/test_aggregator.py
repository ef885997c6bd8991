import unittest

from feedback.errors import ValidationError
from feedback.models import parse_batch
from feedback.services.aggregator import (
    build_headers,
    build_result_table_name,
    build_rows,
    collect_question_ids,
    group_by_cohort,
)
from tests.helpers import make_feedback


class GroupByCohortTest(unittest.TestCase):
    def test_groups_by_branch_year_section(self):
        batch = [
            make_feedback(subject='Math'),
            make_feedback(branch='ECE', year='2nd Year', section='B', subject='Signals'),
            make_feedback(subject='Physics'),
        ]
        groups = group_by_cohort(batch)

        self.assertEqual(list(groups), ['CSE_1st Year_A', 'ECE_2nd Year_B'])
        self.assertEqual([f.subject for f in groups['CSE_1st Year_A']], ['Math', 'Physics'])
        self.assertEqual(len(groups['ECE_2nd Year_B']), 1)

    def test_empty_batch(self):
        self.assertEqual(group_by_cohort([]), {})


class ResultTableNameTest(unittest.TestCase):
    def test_name_is_stable(self):
        self.assertEqual(build_result_table_name('CSE_1st Year_A'), 'Responses_CSE_1st Year_A')
        self.assertEqual(build_result_table_name('CSE_1st Year_A'), build_result_table_name('CSE_1st Year_A'))


class BuildRowsTest(unittest.TestCase):
    def test_question_ids_are_sorted_union(self):
        group = [
            make_feedback(responses={'question2': 4}),
            make_feedback(responses={'question1': 5, 'question3': 'ok'}),
        ]
        self.assertEqual(collect_question_ids(group), ['question1', 'question2', 'question3'])

    def test_row_layout(self):
        group = [make_feedback(responses={'question1': 8})]
        rows = build_rows(group, ['question1'])
        self.assertEqual(rows, [['2024-01-31T10:00:00.000Z', 'CSE', '1st Year', 'A', 'Math', 'Dr.X', '8']])

    def test_missing_answers_are_empty_strings(self):
        group = [
            make_feedback(responses={'question1': 3}),
            make_feedback(responses={'question2': True, 'question3': None}),
        ]
        question_ids = ['question1', 'question2', 'question3']
        rows = build_rows(group, question_ids)

        for row in rows:
            self.assertEqual(len(row), 6 + len(question_ids))
            self.assertNotIn(None, row)
        self.assertEqual(rows[0][6:], ['3', '', ''])
        self.assertEqual(rows[1][6:], ['', 'true', ''])

    def test_falsy_answers_are_kept(self):
        rows = build_rows([make_feedback(responses={'question1': 0, 'question2': False})], ['question1', 'question2'])
        self.assertEqual(rows[0][6:], ['0', 'false'])

    def test_missing_timestamp_is_filled(self):
        rows = build_rows([make_feedback(timestamp=None)], [])
        self.assertTrue(rows[0][0].endswith('Z'))
        self.assertEqual(len(rows[0]), 6)

    def test_headers(self):
        self.assertEqual(
            build_headers(['question1']),
            ['Timestamp', 'Branch', 'Year', 'Section', 'Subject', 'Teacher', 'question1'],
        )


class ParseBatchTest(unittest.TestCase):
    def test_parses_json_items(self):
        batch = parse_batch([{
            'branch': 'CSE', 'year': '1st Year', 'section': 'A', 'subject': 'Math',
            'teacher': 'Dr.X', 'registrationNumber': '23B81A4623',
            'responses': {'question1': 8}, 'timestamp': 'T',
        }])
        self.assertEqual(batch[0].cohort_key, 'CSE_1st Year_A')
        self.assertEqual(batch[0].registration_number, '23B81A4623')
        self.assertEqual(batch[0].responses, {'question1': 8})

    def test_none_is_empty(self):
        self.assertEqual(parse_batch(None), [])

    def test_rejects_bad_payloads(self):
        with self.assertRaises(ValidationError):
            parse_batch({'branch': 'CSE'})
        with self.assertRaises(ValidationError):
            parse_batch([{'branch': 'CSE'}])
        with self.assertRaises(ValidationError):
            parse_batch([{
                'branch': 'CSE', 'year': '1', 'section': 'A', 'subject': 'M',
                'teacher': 'T', 'responses': ['not', 'a', 'map'],
            }])


if __name__ == '__main__':
    unittest.main()
