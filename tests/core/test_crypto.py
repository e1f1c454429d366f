#!/usr/bin/env python3
"""
NessusLens - Cryptography Tests
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import io
import unittest
from unittest.mock import patch

from cryptography.fernet import InvalidToken
from rich.console import Console

from nessuslens.core.crypto import (
    ask_password_twice,
    decrypt_data,
    derive_key_from_password,
    encrypt_data,
)


class TestCrypto(unittest.TestCase):
    def test_derive_key_is_deterministic_for_salt(self):
        key1, salt = derive_key_from_password("a long password!")
        key2, _ = derive_key_from_password("a long password!", salt)
        self.assertEqual(key1, key2)
        self.assertEqual(len(salt), 16)

    def test_round_trip(self):
        key, _ = derive_key_from_password("a long password!", b"s" * 16)
        token = encrypt_data("plugin,host\n1,10.0.0.1\n", key)
        self.assertEqual(decrypt_data(token, key), b"plugin,host\n1,10.0.0.1\n")

    def test_wrong_key_fails(self):
        key, salt = derive_key_from_password("a long password!", b"s" * 16)
        other, _ = derive_key_from_password("another password", salt)
        with self.assertRaises(InvalidToken):
            decrypt_data(encrypt_data(b"secret", key), other)

    def test_ask_password_twice_retries(self):
        answers = ["short", "long enough pass", "mismatch value", "long enough pass", "long enough pass"]
        buf = io.StringIO()
        console = Console(file=buf, no_color=True, width=120)
        with patch("getpass.getpass", side_effect=answers) as prompt:
            self.assertEqual(ask_password_twice("Password", console), "long enough pass")

        output = buf.getvalue()
        self.assertIn("[WARN] Password must be at least 12 characters", output)
        self.assertIn("[WARN] Passwords don't match", output)
        self.assertNotIn("\033[", output)
        self.assertEqual(prompt.call_args_list[0].args[0], "? Password: ")
