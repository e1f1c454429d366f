#!/usr/bin/env python3
"""
NessusLens - Cryptography Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Handles encryption, decryption, and key derivation for exported reports.
"""

import base64
import getpass
import os
from typing import Optional, Tuple, Union

from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from rich.console import Console

from nessuslens.core.ui import make_console, print_status
from nessuslens.utils.constants import MIN_PASSWORD_LENGTH, PBKDF2_ITERATIONS, SALT_SIZE


def derive_key_from_password(password: str, salt: Optional[bytes] = None) -> Tuple[bytes, bytes]:
    """
    Derive encryption key from password using PBKDF2.

    Args:
        password: User password
        salt: Optional salt bytes. If None, generates random salt.

    Returns:
        Tuple of (key_bytes, salt_bytes)
    """
    if salt is None:
        salt = os.urandom(SALT_SIZE)

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    key = base64.urlsafe_b64encode(kdf.derive(password.encode()))
    return key, salt


def encrypt_data(data: Union[str, bytes], encryption_key: bytes) -> bytes:
    """
    Encrypt data using Fernet (AES-128-CBC + HMAC-SHA256).

    Args:
        data: String or bytes to encrypt
        encryption_key: Fernet-compatible key

    Returns:
        Encrypted bytes
    """
    if isinstance(data, str):
        data = data.encode()
    return Fernet(encryption_key).encrypt(data)


def decrypt_data(encrypted_data: bytes, encryption_key: bytes) -> bytes:
    """
    Decrypt data using Fernet.

    Raises:
        cryptography.fernet.InvalidToken: If the key is wrong or data was tampered with
    """
    return Fernet(encryption_key).decrypt(encrypted_data)


def ask_password_twice(prompt: str = "Password", console: Optional[Console] = None) -> str:
    """
    Prompt user for password twice with validation.

    Args:
        prompt: Prompt text
        console: Console for validation warnings (default: stdout console)

    Returns:
        Validated password string
    """
    console = console or make_console()
    while True:
        p1 = getpass.getpass(f"? {prompt}: ")

        if len(p1) < MIN_PASSWORD_LENGTH:
            print_status(
                console, f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "WARN"
            )
            continue

        p2 = getpass.getpass("? Confirm: ")

        if p1 == p2:
            return p1

        print_status(console, "Passwords don't match", "WARN")
