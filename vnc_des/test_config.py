'''
Tests for configuration parsing, validation and persistence
'''
import dataclasses
import json
import os
import tempfile
import unittest

from vnc_des.config import TIGHTVNC_DEFAULT_KEY, VncDesConfig, parse_hex_key
from vnc_des.errors import ConfigError, HexDecodeError, InvalidKeyFormat


class DefaultsTest(unittest.TestCase):

    def test_defaults(self):
        config = VncDesConfig()
        self.assertEqual(config.encryption_key, bytes.fromhex('17526b06234e5807'))
        self.assertEqual(config.encryption_key, TIGHTVNC_DEFAULT_KEY)
        self.assertFalse(config.strict_mode)
        self.assertTrue(config.auto_truncate)
        self.assertEqual(config.max_password_length, 8)
        config.validate()

    def test_frozen(self):
        config = VncDesConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.strict_mode = True

    def test_with_methods_return_copies(self):
        config = VncDesConfig()
        changed = config.with_strict_mode(True).with_auto_truncate(False).with_max_password_length(16)
        self.assertTrue(changed.strict_mode)
        self.assertFalse(changed.auto_truncate)
        self.assertEqual(changed.max_password_length, 16)
        self.assertEqual(config, VncDesConfig())


class KeyTest(unittest.TestCase):

    def test_hex_key(self):
        config = VncDesConfig().with_hex_key('17526b06234e5807')
        self.assertEqual(config.encryption_key, TIGHTVNC_DEFAULT_KEY)
        self.assertEqual(config.key_as_hex(), '17526b06234e5807')
        self.assertEqual(parse_hex_key(' 17526B06234E5807 '), TIGHTVNC_DEFAULT_KEY)

    def test_bad_hex(self):
        for text in ('', 'xyz', '17526b06234e580', '17526b06234e58zz'):
            with self.assertRaises(HexDecodeError):
                parse_hex_key(text)

    def test_wrong_key_length(self):
        for text in ('1752', '17526b06234e580700'):
            with self.assertRaises(InvalidKeyFormat):
                parse_hex_key(text)
        with self.assertRaises(InvalidKeyFormat):
            VncDesConfig(encryption_key=b'1234567')
        with self.assertRaises(InvalidKeyFormat):
            VncDesConfig(encryption_key='12345678')

    def test_bytearray_key_is_copied(self):
        key = bytearray(b'12345678')
        config = VncDesConfig().with_key(key)
        key[0] = 0
        self.assertEqual(config.encryption_key, b'12345678')


class ValidateTest(unittest.TestCase):

    def test_bounds(self):
        for length in (1, 8, 256):
            VncDesConfig(max_password_length=length).validate()
        for length in (0, -1, 257, 1000):
            with self.assertRaises(ConfigError):
                VncDesConfig(max_password_length=length)

    def test_with_max_password_length_rejects_out_of_range(self):
        config = VncDesConfig()
        for length in (0, -1, 257):
            with self.assertRaises(ConfigError):
                config.with_max_password_length(length)
        self.assertEqual(config.with_max_password_length(256).max_password_length, 256)

    def test_not_an_integer(self):
        for length in ('8', 8.0, True):
            with self.assertRaises(ConfigError):
                VncDesConfig(max_password_length=length)


class JsonTest(unittest.TestCase):

    def test_round_trip(self):
        config = VncDesConfig(encryption_key=bytes(range(8)), strict_mode=True,
                              auto_truncate=False, max_password_length=6)
        self.assertEqual(VncDesConfig.from_json(config.to_json()), config)

    def test_layout(self):
        data = json.loads(VncDesConfig().to_json())
        self.assertEqual(data, {
            'encryption_key': [23, 82, 107, 6, 35, 78, 88, 7],
            'strict_mode': False,
            'auto_truncate': True,
            'max_password_length': 8,
        })

    def test_hex_string_key(self):
        config = VncDesConfig.from_json(json.dumps({
            'encryption_key': '0123456789abcdef',
            'strict_mode': False,
            'auto_truncate': True,
            'max_password_length': 8,
        }))
        self.assertEqual(config.key_as_hex(), '0123456789abcdef')

    def test_invalid_json(self):
        with self.assertRaises(ConfigError):
            VncDesConfig.from_json('{not json')
        with self.assertRaises(ConfigError):
            VncDesConfig.from_json('[]')

    def test_missing_field(self):
        data = VncDesConfig().to_dict()
        del data['strict_mode']
        with self.assertRaises(ConfigError) as cm:
            VncDesConfig.from_json(json.dumps(data))
        self.assertIn('strict_mode', str(cm.exception))

    def test_bad_values(self):
        bad = [
            {'max_password_length': 0},
            {'max_password_length': 300},
            {'strict_mode': 'yes'},
            {'encryption_key': [1, 2, 3, 4, 5, 6, 7, 256]},
            {'encryption_key': 12345678},
        ]
        for change in bad:
            data = VncDesConfig().to_dict()
            data.update(change)
            with self.assertRaises(ConfigError):
                VncDesConfig.from_json(json.dumps(data))

    def test_short_key_list(self):
        data = VncDesConfig().to_dict()
        data['encryption_key'] = [1, 2, 3]
        with self.assertRaises(InvalidKeyFormat):
            VncDesConfig.from_dict(data)


class FileTest(unittest.TestCase):

    def test_save_and_load(self):
        config = VncDesConfig().with_hex_key('0123456789abcdef').with_max_password_length(5)
        with tempfile.TemporaryDirectory() as tdir:
            path = os.path.join(tdir, 'config.json')
            config.save_to_file(path)
            self.assertEqual(VncDesConfig.from_file(path), config)

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tdir:
            with self.assertRaises(OSError):
                VncDesConfig.from_file(os.path.join(tdir, 'missing.json'))


if __name__ == '__main__':
    unittest.main()
