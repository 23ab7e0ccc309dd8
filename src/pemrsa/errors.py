"""Error types raised by the PEM/RSA service.

Every error derives from RSAServiceError, and additionally from the builtin that would otherwise describe the
failure, so callers may catch either the specific type or the broad builtin.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAServiceError(Exception):
    """Base class of all service errors."""


class KeyParseError(RSAServiceError, IOError):
    """The PEM text is not a recognised key encoding, even after repair."""


class KeyDerivationError(RSAServiceError, ValueError):
    """A public key cannot be derived from the private key (no public exponent)."""


class UnsupportedKeyTypeError(RSAServiceError, TypeError):
    """The key is of a kind the requested operation cannot use."""


class PaddingError(RSAServiceError, RuntimeError):
    """Decrypted block does not carry valid PKCS#1 v1.5 padding.

    Also the symptom of a wrong key or a corrupted ciphertext.
    """


class InvalidEncodingError(RSAServiceError, ValueError):
    """A payload argument is not valid Base64."""


class CryptoBackendError(RSAServiceError, RuntimeError):
    """The RSA primitive rejected the operation, e.g. a block too large for the key."""
