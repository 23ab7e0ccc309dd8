# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import hashlib

from cryptography.hazmat.primitives.asymmetric import padding
import pytest

import pemrsa
from pemrsa import service
from pemrsa.errors import CryptoBackendError
from pemrsa.errors import InvalidEncodingError
from pemrsa.errors import KeyDerivationError
from pemrsa.errors import KeyParseError
from pemrsa.errors import PaddingError
from pemrsa.errors import RSAServiceError
from pemrsa.errors import UnsupportedKeyTypeError

from keymaterial import b64
from keymaterial import exponentless_pem
from keymaterial import private_pem
from keymaterial import public_pem
import keymaterial

standard_payload = b"The quick brown fox jumps over the lazy dog1234567890!@#$%^&*()-_=+[{}];:\\|<>,./?~`'\""
digest_b64 = b64(hashlib.sha256(standard_payload).digest())


def test_encrypt_decrypt(keyset, private_format, public_format):
    ciphertext = pemrsa.encrypt(public_pem(keyset, public_format), b64(standard_payload))
    assert len(base64.b64decode(ciphertext)) == keyset.key_size // 8
    assert pemrsa.decrypt(private_pem(keyset, private_format), ciphertext) == b64(standard_payload)


def test_encrypt_interoperates(keyset):
    ciphertext = base64.b64decode(pemrsa.encrypt(public_pem(keyset), b64(standard_payload)))
    assert keyset.decrypt(ciphertext, padding.PKCS1v15()) == standard_payload


def test_decrypt_interoperates(keyset):
    ciphertext = keyset.public_key().encrypt(standard_payload, padding.PKCS1v15())
    assert pemrsa.decrypt(private_pem(keyset), b64(ciphertext)) == b64(standard_payload)


def test_encrypt_with_private_key(key2048, private_format, mocker):
    mocker.patch("pemrsa.keys.token_bytes", side_effect=lambda n: b"\x5a" * n)
    from_private = pemrsa.encrypt(private_pem(key2048, private_format), b64(standard_payload))
    from_public = pemrsa.encrypt(public_pem(key2048), b64(standard_payload))
    assert from_private == from_public
    assert pemrsa.decrypt(private_pem(key2048), from_private) == b64(standard_payload)


def test_encrypt_output_format(key2048):
    ciphertext = pemrsa.encrypt(public_pem(key2048), b64(b"x"))
    assert "\n" not in ciphertext
    assert ciphertext == b64(base64.b64decode(ciphertext, validate=True))


def test_encrypt_too_long(keyset):
    limit = keyset.key_size // 8 - 11
    pemrsa.encrypt(public_pem(keyset), b64(b"A" * limit))
    with pytest.raises(CryptoBackendError, match="must not be longer"):
        pemrsa.encrypt(public_pem(keyset), b64(b"A" * (limit + 1)))


def test_encrypt_needs_exponent(key2048):
    with pytest.raises(KeyDerivationError):
        pemrsa.encrypt(exponentless_pem(key2048), b64(standard_payload))


def test_decrypt_without_exponent(key2048):
    ciphertext = pemrsa.encrypt(public_pem(key2048), digest_b64)
    assert pemrsa.decrypt(exponentless_pem(key2048), ciphertext) == digest_b64


def test_decrypt_with_public_key(key2048, public_format):
    with pytest.raises(UnsupportedKeyTypeError):
        pemrsa.decrypt(public_pem(key2048, public_format), b64(b"anything"))


def test_decrypt_bad_padding(key2048):
    signature = pemrsa.sign(private_pem(key2048), digest_b64)
    with pytest.raises(PaddingError):
        pemrsa.decrypt(private_pem(key2048), signature)


def test_decrypt_corrupt_ciphertext(key2048):
    with pytest.raises(CryptoBackendError):
        pemrsa.decrypt(private_pem(key2048), b64(b"\xff" * 256))
    with pytest.raises(CryptoBackendError):
        pemrsa.decrypt(private_pem(key2048), b64(b"\x01" * 257))


def test_sign_verify(keyset, private_format, public_format):
    signature = pemrsa.sign(private_pem(keyset, private_format), digest_b64)
    assert len(base64.b64decode(signature)) == keyset.key_size // 8
    assert pemrsa.verify_signature(public_pem(keyset, public_format), digest_b64, signature)


def test_sign_is_raw(keyset):
    signature = base64.b64decode(pemrsa.sign(private_pem(keyset), b64(standard_payload[:40])))
    recovered = keyset.public_key().recover_data_from_signature(signature, padding.PKCS1v15(), None)
    assert recovered == standard_payload[:40]


def test_sign_is_deterministic(key2048):
    assert pemrsa.sign(private_pem(key2048), digest_b64) == pemrsa.sign(private_pem(key2048, "PKCS1"), digest_b64)


def test_sign_with_public_key(key2048, public_format):
    with pytest.raises(UnsupportedKeyTypeError):
        pemrsa.sign(public_pem(key2048, public_format), digest_b64)


def test_sign_too_long(key2048):
    with pytest.raises(CryptoBackendError):
        pemrsa.sign(private_pem(key2048), b64(b"A" * 246))


def test_verify_with_private_key(key2048, private_format):
    signature = pemrsa.sign(private_pem(key2048), digest_b64)
    assert pemrsa.verify_signature(private_pem(key2048, private_format), digest_b64, signature)


def test_verify_mismatch(key2048):
    signature = pemrsa.sign(private_pem(key2048), digest_b64)
    other = b64(hashlib.sha256(b"NONSTANDARDPAYLOAD").digest())
    assert not pemrsa.verify_signature(public_pem(key2048), other, signature)


def test_verify_wrong_key(key2048):
    signature = pemrsa.sign(private_pem(keymaterial.known_key(1024)), digest_b64)
    assert not pemrsa.verify_signature(public_pem(key2048), digest_b64, signature)


@pytest.mark.parametrize("size", [246, 300])
def test_verify_data_too_long(key2048, size):
    signature = pemrsa.sign(private_pem(key2048), digest_b64)
    assert not pemrsa.verify_signature(public_pem(key2048), b64(b"A" * size), signature)


def test_verify_signature_too_long(key2048):
    signature = base64.b64decode(pemrsa.sign(private_pem(key2048), digest_b64))
    with pytest.raises(CryptoBackendError, match="Signature must not be longer"):
        pemrsa.verify_signature(public_pem(key2048), digest_b64, b64(b"\x00" + signature))


def test_verify_stripped_leading_zero(key2048):
    priv, pub = private_pem(key2048), public_pem(key2048)
    for cnt in range(10000):
        data_b64 = b64(hashlib.sha256(cnt.to_bytes(4, "big")).digest())
        signature = base64.b64decode(pemrsa.sign(priv, data_b64))
        if signature[0] == 0:
            break
    else:
        pytest.fail("No signature with a leading zero octet found.")
    assert pemrsa.verify_signature(pub, data_b64, b64(signature[1:]))


@pytest.mark.parametrize("action", ["encrypt", "decrypt", "sign", "verify_signature"])
def test_invalid_base64(key2048, action):
    args = [private_pem(key2048), "not base64!"]
    if action == "verify_signature":
        args.append(digest_b64)
    with pytest.raises(InvalidEncodingError, match="data_b64|encrypted_b64"):
        getattr(pemrsa, action)(*args)


def test_invalid_signature_base64(key2048):
    with pytest.raises(InvalidEncodingError, match="signature_b64"):
        pemrsa.verify_signature(public_pem(key2048), digest_b64, "====")


@pytest.mark.parametrize("value", ["QUJ", "QUJDRA=", "éé==", None, b"QUJD"])
def test_b64_dec_strict(value):
    with pytest.raises(InvalidEncodingError):
        service.b64_dec(value)


def test_b64_dec_ignores_whitespace():
    assert service.b64_dec("QUJD\nREVG\r\n  ") == b"ABCDEF"


def test_repaired_key(key2048):
    flattened = private_pem(key2048).replace("\n", " ")
    bare = "".join(public_pem(key2048).strip().splitlines()[1:-1])
    ciphertext = pemrsa.encrypt(bare, digest_b64)
    assert pemrsa.decrypt(flattened, ciphertext) == digest_b64


def test_unparseable_key():
    with pytest.raises(KeyParseError):
        pemrsa.encrypt("random text, certainly not a key", digest_b64)


def test_errors_are_typed(key2048):
    with pytest.raises(RSAServiceError):
        pemrsa.decrypt(public_pem(key2048), digest_b64)
    with pytest.raises(TypeError):
        pemrsa.sign(public_pem(key2048), digest_b64)
    with pytest.raises(IOError):
        pemrsa.verify_signature("", digest_b64, digest_b64)


def test_hello_scenario(key2048):
    priv, pub = private_pem(key2048), public_pem(key2048)
    assert pemrsa.decrypt(priv, pemrsa.encrypt(pub, "aGVsbG8=")) == "aGVsbG8="
    signature = pemrsa.sign(priv, "aGVsbG8=")
    assert pemrsa.verify_signature(pub, "aGVsbG8=", signature)
    altered = ("B" if signature[0] == "A" else "A") + signature[1:]
    assert not pemrsa.verify_signature(pub, "aGVsbG8=", altered)
