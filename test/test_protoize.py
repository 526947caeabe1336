import argparse
import io
import os
import sys
import tempfile
import unittest
from unittest.mock import patch

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from protoize.protoize import main


def get_openapi():
    """Provides the OpenAPI input file path."""
    return os.path.join(os.path.dirname(__file__), 'openapi', 'pets.yaml')


def o2p_args(**kwargs):
    args = dict(command='o2p', input=get_openapi(), out=None, annotate=False, skip_rpcs=False,
                namespace_enums=False, wrap_primitives=False, indent=4)
    args.update(kwargs)
    return argparse.Namespace(**args)


class TestMain(unittest.TestCase):

    @patch('argparse.ArgumentParser.parse_args', return_value=argparse.Namespace(command=None))
    def test_main_no_command(self, mock_parse_args):
        """Test main function with no command."""
        with patch('builtins.print'):
            main()

    @patch('argparse.ArgumentParser.parse_args', return_value=argparse.Namespace(command=None, version=True))
    def test_main_version(self, mock_parse_args):
        """Test main function with --version."""
        with patch('builtins.print') as mock_print:
            main()
        mock_print.assert_called_once_with('Protoize 0.1.0')

    @patch('argparse.ArgumentParser.parse_args', return_value=o2p_args(out=tempfile.gettempdir() + '/protoize-cli/pets.proto', annotate=True))
    def test_main_o2p_command(self, mock_parse_args):
        """Test main function with o2p command."""
        main()
        output = tempfile.gettempdir() + '/protoize-cli/pets.proto'
        assert os.path.exists(output)
        with open(output, 'r', encoding='utf-8') as f:
            proto = f.read()
        self.assertIn('service PetsService', proto)
        self.assertIn('get: "/pets/{id}"', proto)

    @patch('argparse.ArgumentParser.parse_args', return_value=o2p_args(indent=2))
    def test_main_o2p_stdout(self, mock_parse_args):
        """Test main function writing the proto to stdout."""
        with patch('sys.stdout', new_callable=io.StringIO) as mock_stdout:
            main()
        self.assertIn('message GetPetsIdRequest {\n  int32 id = 1;\n}', mock_stdout.getvalue())
        self.assertNotIn('Executing', mock_stdout.getvalue())

    @patch('argparse.ArgumentParser.parse_args', return_value=o2p_args(input=None))
    def test_main_o2p_stdin(self, mock_parse_args):
        """Test main function reading the document from stdin."""
        with open(get_openapi(), 'r', encoding='utf-8') as f:
            document = f.read()
        with patch('sys.stdin', io.StringIO(document)), \
                patch('sys.stdout', new_callable=io.StringIO) as mock_stdout:
            main()
        self.assertIn('package pets;', mock_stdout.getvalue())

    @patch('argparse.ArgumentParser.parse_args', return_value=o2p_args(input='does-not-exist.yaml'))
    def test_main_o2p_error(self, mock_parse_args):
        """Test main function with a missing input file."""
        with patch('builtins.print') as mock_print:
            with self.assertRaises(SystemExit) as cm:
                main()
        self.assertEqual(cm.exception.code, 1)
        self.assertEqual(mock_print.call_args[0][0], "Error: ")
        self.assertIn('does-not-exist.yaml', mock_print.call_args[0][1])


if __name__ == '__main__':
    unittest.main()
