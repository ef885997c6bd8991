import os
import unittest
from unittest import mock

import start_server


class PickPortTest(unittest.TestCase):
    def test_first_free_port(self):
        with mock.patch.dict(os.environ, {}, clear=True), \
                mock.patch.object(start_server, 'check_port_available', side_effect=[False, True]):
            self.assertEqual(start_server.pick_port('127.0.0.1', [8000, 8080]), 8080)

    def test_port_environment_variable_first(self):
        with mock.patch.dict(os.environ, {'PORT': '9000'}, clear=True), \
                mock.patch.object(start_server, 'check_port_available', return_value=True) as check:
            self.assertEqual(start_server.pick_port('127.0.0.1', [8000]), 9000)
        check.assert_called_once_with('127.0.0.1', 9000)

    def test_no_free_port(self):
        with mock.patch.dict(os.environ, {}, clear=True), \
                mock.patch.object(start_server, 'check_port_available', return_value=False):
            self.assertIsNone(start_server.pick_port('127.0.0.1', [8000, 8080]))


if __name__ == '__main__':
    unittest.main()
