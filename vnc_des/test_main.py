'''
Test the vnc_des_tool command line interface
'''
import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from vnc_des.config import VncDesConfig
from vnc_des.main import build_parser, create_processor, main
from vnc_des.password import from_hex_string


class CliTestCase(unittest.TestCase):

    def run_main(self, *argv):
        with patch('sys.stdout', new_callable=io.StringIO) as out, \
                patch('sys.stderr', new_callable=io.StringIO) as err:
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()


class EncryptDecryptTest(CliTestCase):

    def test_quiet_encrypt(self):
        code, out, _ = self.run_main('encrypt', 'test', '-q')
        self.assertEqual(code, 0)
        self.assertEqual(out, '2f981dc548e09ec2\n')

    def test_report_encrypt(self):
        code, out, _ = self.run_main('encrypt', 'test')
        self.assertEqual(code, 0)
        self.assertIn('Hex: 2f981dc548e09ec2', out)
        self.assertNotIn('Warning', out)

    def test_truncation_warning(self):
        code, out, _ = self.run_main('-v', 'encrypt', 'password123')
        self.assertEqual(code, 0)
        self.assertIn("truncated to 'password'", out)
        self.assertIn('decrypted password matches', out)

    def test_quiet_decrypt(self):
        code, out, _ = self.run_main('decrypt', '2F98 1DC5 48E0 9EC2', '-q')
        self.assertEqual(code, 0)
        self.assertEqual(out, 'test\n')

    def test_report_decrypt(self):
        code, out, _ = self.run_main('decrypt', '2F981DC548E09EC2')
        self.assertEqual(code, 0)
        self.assertIn('Cleaned input: 2f981dc548e09ec2', out)
        self.assertIn("Password: 'test'", out)

    def test_decrypt_passes_raw_input_to_hex_decoder(self):
        with patch('vnc_des.main.from_hex_string', wraps=from_hex_string) as decode:
            code, out, _ = self.run_main('decrypt', '2F98 1DC5\t48E0 9EC2')
        self.assertEqual(code, 0)
        decode.assert_called_once_with('2F98 1DC5\t48E0 9EC2')
        self.assertIn('Cleaned input: 2f981dc548e09ec2', out)
        self.assertIn("Password: 'test'", out)

    def test_bad_hex(self):
        code, _, err = self.run_main('decrypt', 'xyz', '-q')
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith('error:'))

    def test_custom_key(self):
        code, out, _ = self.run_main('--key', '0123456789abcdef', 'encrypt', 'secret', '-q')
        self.assertEqual(code, 0)
        hex_password = out.strip()
        self.assertNotEqual(hex_password, self.run_main('encrypt', 'secret', '-q')[1].strip())
        code, out, _ = self.run_main('--key', '0123456789abcdef', 'decrypt', hex_password, '-q')
        self.assertEqual(out, 'secret\n')

    def test_bad_key(self):
        code, _, err = self.run_main('--key', '0123', 'encrypt', 'test')
        self.assertEqual(code, 1)
        self.assertIn('8 bytes', err)

    def test_empty_password(self):
        code, _, err = self.run_main('encrypt', '')
        self.assertEqual(code, 1)
        self.assertIn('empty', err)


class VerifyTest(CliTestCase):

    def test_quiet_match(self):
        code, out, _ = self.run_main('verify', 'test', '2f981dc548e09ec2', '-q')
        self.assertEqual(code, 0)
        self.assertEqual(out, 'True\n')

    def test_quiet_mismatch(self):
        code, out, _ = self.run_main('verify', 'wrong', '2f981dc548e09ec2', '-q')
        self.assertEqual(code, 1)
        self.assertEqual(out, 'False\n')

    def test_verbose_mismatch(self):
        code, out, _ = self.run_main('-v', 'verify', 'wrong', '2f981dc548e09ec2')
        self.assertEqual(code, 1)
        self.assertIn('does not match', out)
        self.assertIn('Expected: 2f981dc548e09ec2', out)


class DemoTest(CliTestCase):

    def test_demo(self):
        code, out, _ = self.run_main('demo', 'test')
        self.assertEqual(code, 0)
        self.assertIn('Hex: 2f981dc548e09ec2', out)
        self.assertIn('Verification: match', out)

    def test_default_password(self):
        code, out, _ = self.run_main('demo')
        self.assertEqual(code, 0)
        self.assertIn("Password: 'demo123'", out)


class ConfigCommandTest(CliTestCase):

    def test_show(self):
        code, out, _ = self.run_main('config', '--show')
        self.assertEqual(code, 0)
        self.assertIn('Key: 17526b06234e5807', out)
        self.assertIn('"max_password_length": 8', out)

    def test_generate_then_validate(self):
        with tempfile.TemporaryDirectory() as tdir:
            path = os.path.join(tdir, 'config.json')
            code, _, _ = self.run_main('config', '--generate', path)
            self.assertEqual(code, 0)
            self.assertEqual(VncDesConfig.from_file(path), VncDesConfig())

            code, out, _ = self.run_main('config', '--validate', path)
            self.assertEqual(code, 0)
            self.assertIn('Configuration is valid', out)

    def test_validate_invalid(self):
        with tempfile.TemporaryDirectory() as tdir:
            path = os.path.join(tdir, 'config.json')
            data = VncDesConfig().to_dict()
            data['max_password_length'] = 0
            with open(path, 'w') as fp:
                json.dump(data, fp)
            code, out, _ = self.run_main('config', '--validate', path)
        self.assertEqual(code, 1)
        self.assertIn('Configuration is invalid', out)

    def test_no_option(self):
        code, out, _ = self.run_main('config')
        self.assertEqual(code, 0)
        self.assertIn('--generate FILE', out)

    def test_key_file(self):
        with tempfile.TemporaryDirectory() as tdir:
            path = os.path.join(tdir, 'config.json')
            VncDesConfig().with_hex_key('0123456789abcdef').save_to_file(path)
            code, out, _ = self.run_main('--key-file', path, 'config', '--show')
            self.assertEqual(code, 0)
            self.assertIn('Key: 0123456789abcdef', out)

    def test_missing_key_file(self):
        with tempfile.TemporaryDirectory() as tdir:
            code, _, err = self.run_main('--key-file', os.path.join(tdir, 'nope.json'),
                                         'encrypt', 'test')
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith('error:'))


class ParserTest(unittest.TestCase):

    def test_default_processor(self):
        args = build_parser().parse_args(['demo'])
        self.assertEqual(create_processor(args).config, VncDesConfig())

    def test_key_takes_precedence(self):
        args = build_parser().parse_args(['--key', '0123456789abcdef', '--key-file', 'x.json', 'demo'])
        self.assertEqual(create_processor(args).config.key_as_hex(), '0123456789abcdef')

    @patch('sys.stderr', new_callable=io.StringIO)
    def test_command_required(self, mock_stderr):
        with self.assertRaises(SystemExit) as cm:
            build_parser().parse_args([])
        self.assertEqual(cm.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
