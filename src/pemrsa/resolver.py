"""Turns PEM key text into a usable RSA key for a given operation.

Resolution is a two-step pipeline: parse the text as given, and only if that fails on structure, parse the
repaired text once. Afterwards a single dispatch on the key kind hands out the key the operation needs.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from pemrsa.errors import KeyParseError
from pemrsa.errors import UnsupportedKeyTypeError
from pemrsa.keys import decode_der
from pemrsa.keys import KeyKind
from pemrsa.keys import ResolvedKey
from pemrsa.keys import RSAPrivKey
from pemrsa.keys import RSAPubKey
from pemrsa.pem import read_pem
from pemrsa.pem import repair_pem

log = logging.getLogger(__name__)


def load(pem_text: str) -> ResolvedKey:
    """Parses PEM text into a resolved key, without any repair.

    Raises:
        KeyParseError: If the text is not a recognised key encoding.
        UnsupportedKeyTypeError: If the key is recognised but unusable.
    """
    label, der = read_pem(pem_text)
    return decode_der(der, label)


def try_load(pem_text: str) -> ResolvedKey | None:
    """Like `load`, but returns None on a structural parse failure."""
    try:
        return load(pem_text)
    except KeyParseError as exc:
        log.debug("PEM parse failed: %s", exc)
        return None


def resolve(pem_text: str) -> ResolvedKey:
    """Resolves PEM text into a key, retrying once with repaired text.

    If the repaired text fails as well, the error of that second attempt is raised.

    Args:
        pem_text: PEM encoded RSA key, public or private.

    Returns:
        The resolved key.

    Raises:
        KeyParseError: If the text is not a recognised key encoding even after repair.
        UnsupportedKeyTypeError: If the key is recognised but unusable.
    """
    if not isinstance(pem_text, str):
        raise KeyParseError(f"PEM key must be text, not {type(pem_text).__name__}")
    resolved = try_load(pem_text)
    if resolved is None:
        log.debug("Retrying with repaired PEM text")
        resolved = load(repair_pem(pem_text))
    return resolved


def require_public(resolved: ResolvedKey) -> RSAPubKey:
    """Gets the public key, deriving it from a private key if that is what was given.

    Raises:
        KeyDerivationError: If a private key without public exponent was given.
        UnsupportedKeyTypeError: If the key is of an unknown kind.
    """
    match resolved.kind:
        case KeyKind.PUBLIC:
            return resolved.key
        case KeyKind.PRIVATE:
            log.debug("Deriving public key from private key")
            return resolved.key.public_key()
    raise UnsupportedKeyTypeError(f"Unknown key object type: {resolved.kind!r}")


def require_private(resolved: ResolvedKey) -> RSAPrivKey:
    """Gets the private key.

    Raises:
        UnsupportedKeyTypeError: If a public key was given; no private key can be derived from it.
    """
    match resolved.kind:
        case KeyKind.PRIVATE:
            return resolved.key
        case KeyKind.PUBLIC:
            raise UnsupportedKeyTypeError("Invalid key object type: a private key is required, got a public key")
    raise UnsupportedKeyTypeError(f"Unknown key object type: {resolved.kind!r}")
