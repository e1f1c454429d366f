#!/usr/bin/env python3
"""NessusLens Export Decryptor"""

import getpass
import glob
import os
import sys

from cryptography.fernet import InvalidToken

from nessuslens.core.crypto import decrypt_data, derive_key_from_password


def find_salt_file(encrypted_file):
    """
    Locate the salt written next to an encrypted export.

    Exports are named <scan id>_<view>.<ext>.enc and share <scan id>.salt;
    the longest matching scan id wins.
    """
    directory = os.path.dirname(os.path.abspath(encrypted_file))
    base = os.path.basename(encrypted_file)
    best = None
    for candidate in glob.glob(os.path.join(directory, "*.salt")):
        stem = os.path.basename(candidate)[: -len(".salt")]
        if base.startswith(stem + "_") and (best is None or len(candidate) > len(best)):
            best = candidate
    return best


def decrypt_report(encrypted_file, password=None):
    if not os.path.exists(encrypted_file):
        print(f"File not found: {encrypted_file}")
        return False

    salt_file = find_salt_file(encrypted_file)
    if not salt_file:
        print(f"Salt file not found next to {encrypted_file}")
        return False

    with open(encrypted_file, "rb") as f:
        encrypted_data = f.read()
    with open(salt_file, "rb") as f:
        salt = f.read()

    if password is None:
        password = getpass.getpass("Decryption password: ")
    key, _ = derive_key_from_password(password, salt)

    try:
        decrypted = decrypt_data(encrypted_data, key)
    except InvalidToken:
        print("Decryption failed: wrong password or corrupted file")
        return False

    output_file = encrypted_file[: -len(".enc")] if encrypted_file.endswith(".enc") else ""
    # Never overwrite an existing plaintext file
    if not output_file or os.path.exists(output_file):
        output_file = encrypted_file + ".decrypted"

    with open(output_file, "wb") as f:
        f.write(decrypted)

    print(f"Decrypted successfully: {output_file}")
    return True


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: nessuslens_decrypt.py <export_file.enc>")
        sys.exit(1)

    ok = decrypt_report(sys.argv[1])
    sys.exit(0 if ok else 1)
