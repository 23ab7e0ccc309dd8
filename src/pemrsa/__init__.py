"""RSA encryption, decryption, signing and verification over PEM keys and Base64 payloads.

Provides four stateless operations taking PEM encoded keys (PKCS#1, PKCS#8 or X.509 SubjectPublicKeyInfo) as
text and binary payloads as Base64 strings. Damaged PEM text (missing delimiters, flattened line breaks) is repaired
and parsed a second time before giving up. Where a public key is needed a private key may be given instead; the
public key is then derived from it.

Typical usage example:

    c = encrypt(private_pem, "aGVsbG8=")
    m = decrypt(private_pem, c)
    s = sign(private_pem, digest_b64)
    ok = verify_signature(public_pem, digest_b64, s)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from pemrsa.errors import CryptoBackendError
from pemrsa.errors import InvalidEncodingError
from pemrsa.errors import KeyDerivationError
from pemrsa.errors import KeyParseError
from pemrsa.errors import PaddingError
from pemrsa.errors import RSAServiceError
from pemrsa.errors import UnsupportedKeyTypeError
from pemrsa.keys import KeyKind
from pemrsa.keys import ResolvedKey
from pemrsa.keys import RSAPrivKey
from pemrsa.keys import RSAPubKey
from pemrsa.pem import repair_pem
from pemrsa.resolver import resolve
from pemrsa.service import decrypt
from pemrsa.service import encrypt
from pemrsa.service import sign
from pemrsa.service import verify_signature

__version__ = "0.1.0"
__all__ = [
    "encrypt",
    "decrypt",
    "sign",
    "verify_signature",
    "resolve",
    "repair_pem",
    "KeyKind",
    "ResolvedKey",
    "RSAPrivKey",
    "RSAPubKey",
    "RSAServiceError",
    "KeyParseError",
    "KeyDerivationError",
    "UnsupportedKeyTypeError",
    "PaddingError",
    "InvalidEncodingError",
    "CryptoBackendError",
]
