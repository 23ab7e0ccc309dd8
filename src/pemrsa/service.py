"""The four RSA service operations: encrypt, decrypt, sign and verify_signature.

Every operation takes a PEM key and Base64 payloads, and returns Base64 (or a bool for verification). Encryption
uses RSA/ECB/PKCS1Padding over a single block; signing is raw RSA with PKCS#1 v1.5 type 1 padding and no digest,
so callers must hash the data themselves before signing it.

Typical usage example:

    c = encrypt(public_pem, "aGVsbG8=")
    m = decrypt(private_pem, c)
    s = sign(private_pem, digest_b64)
    ok = verify_signature(public_pem, digest_b64, s)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import logging

from pemrsa import resolver
from pemrsa.errors import CryptoBackendError
from pemrsa.errors import InvalidEncodingError

log = logging.getLogger(__name__)


def encrypt(pem_key: str, data_b64: str) -> str:
    """RSA Encryption.

    Args:
        pem_key: RSA Key (Public or Private, Public will be derived from Private).
        data_b64: Data encoded with Base64 to encrypt.

    Returns:
        Encrypted data Base64 encoded.

    Raises:
        CryptoBackendError: If the data does not fit a single block for this key.
    """
    pubkey = resolver.require_public(resolver.resolve(pem_key))
    data = b64_dec(data_b64, "data_b64")
    log.debug("Encrypting %d bytes with %d-bit key", len(data), pubkey.mod.bit_length())
    try:
        ciphertext = pubkey.enc_pkcs1v15(data)
    except ValueError as exc:
        raise CryptoBackendError(str(exc)) from exc
    return b64_enc(ciphertext)


def decrypt(pem_key: str, encrypted_b64: str) -> str:
    """RSA Decryption.

    Args:
        pem_key: RSA Private Key.
        encrypted_b64: RSA Encrypted data encoded with Base64.

    Returns:
        Original data Base64 encoded.

    Raises:
        UnsupportedKeyTypeError: If a public key was given.
        PaddingError: If the decrypted block is not validly padded (wrong key or corrupt ciphertext).
        CryptoBackendError: If the ciphertext is too long or out of range for the key.
    """
    privkey = resolver.require_private(resolver.resolve(pem_key))
    ciphertext = b64_dec(encrypted_b64, "encrypted_b64")
    log.debug("Decrypting %d bytes with %d-bit key", len(ciphertext), privkey.mod.bit_length())
    try:
        data = privkey.dec_pkcs1v15(ciphertext)
    except ValueError as exc:
        raise CryptoBackendError(str(exc)) from exc
    return b64_enc(data)


def sign(pem_key: str, data_b64: str) -> str:
    """Creates a raw RSA Signature.

    The bytes are signed exactly as given; no digest is applied.

    Args:
        pem_key: RSA Private Key.
        data_b64: Base64 encoded data to sign.

    Returns:
        Base64 encoded signature.

    Raises:
        UnsupportedKeyTypeError: If a public key was given.
        CryptoBackendError: If the data does not fit a single block for this key.
    """
    privkey = resolver.require_private(resolver.resolve(pem_key))
    data = b64_dec(data_b64, "data_b64")
    log.debug("Signing %d bytes with %d-bit key", len(data), privkey.mod.bit_length())
    try:
        signature = privkey.sign_raw(data)
    except ValueError as exc:
        raise CryptoBackendError(str(exc)) from exc
    return b64_enc(signature)


def verify_signature(pem_key: str, data_b64: str, signature_b64: str) -> bool:
    """Verify a raw RSA Signature with a RSA Public Key.

    Args:
        pem_key: RSA Key (Public or Private, Public will be derived from Private).
        data_b64: Base64 encoded data the signature was created from.
        signature_b64: Base64 Encoded RSA Signature to verify.

    Returns:
        True if the signature matches the data, False otherwise.

    Raises:
        CryptoBackendError: If the signature is longer than the key modulus.
    """
    pubkey = resolver.require_public(resolver.resolve(pem_key))
    data = b64_dec(data_b64, "data_b64")
    signature = b64_dec(signature_b64, "signature_b64")
    try:
        valid = pubkey.verify_raw(data, signature)
    except ValueError as exc:
        raise CryptoBackendError(str(exc)) from exc
    log.debug("Signature over %d bytes valid: %s", len(data), valid)
    return valid


def b64_enc(msg: bytes) -> str:
    """Encodes bytes as standard, padded, unwrapped Base64 text."""
    return base64.b64encode(msg).decode("ascii")


def b64_dec(msg: str, name: str = "payload") -> bytes:
    """Decodes standard Base64 text strictly.

    Whitespace, including line breaks, is ignored.

    Args:
        msg: The Base64 text.
        name: Argument name used in the error message.

    Returns:
        The decoded bytes.

    Raises:
        InvalidEncodingError: If the text is not valid Base64.
    """
    if not isinstance(msg, str):
        raise InvalidEncodingError(f"{name} must be Base64 text, not {type(msg).__name__}")
    try:
        return base64.b64decode("".join(msg.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError(f"{name} is not valid Base64") from exc
