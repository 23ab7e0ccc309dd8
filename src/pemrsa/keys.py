"""RSA key objects, the RSA primitive with PKCS#1 v1.5 padding, and DER key decoding.

Keys are decoded from PKCS#1 (RSAPublicKey / RSAPrivateKey), PKCS#8 (PrivateKeyInfo) and X.509
(SubjectPublicKeyInfo) DER structures into a tagged ResolvedKey, so the public/private distinction is made once,
at decode time.

Typical usage example:

    resolved = decode_der(der)
    if resolved.kind is KeyKind.PRIVATE:
        c = resolved.key.public_key().enc_pkcs1v15(b"Hi there!")
        r = resolved.key.dec_pkcs1v15(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import hmac
import logging
from secrets import token_bytes
import typing

from pyasn1 import error
from pyasn1.codec.der import decoder
from pyasn1_modules import rfc5208
from pyasn1_modules import rfc5280
from pyasn1_modules import rfc8017

from pemrsa.errors import KeyDerivationError
from pemrsa.errors import KeyParseError
from pemrsa.errors import PaddingError
from pemrsa.errors import UnsupportedKeyTypeError

log = logging.getLogger(__name__)

PKCS1_OVERHEAD = 11
MIN_PADDING = 8


class RSAKey:
    """The overall RSA key class implementation.

    Holds the components strictly mandatory in both a public and a private key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        bsize: The length of the modulus in bytes.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo
        self.bsize = (self.mod.bit_length() + 7) // 8

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt/Sign/Verify).

        Args:
            message: The int-marshalled message.

        Returns:
            The transformed message representative.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return pow(message, self.expo, self.mod)

    def max_payload(self) -> int:
        """Largest payload a single PKCS#1 v1.5 block can carry."""
        return self.bsize - PKCS1_OVERHEAD

    def _check_payload(self, message: bytes) -> None:
        """Checks that the message fits a single PKCS#1 v1.5 block.

        Args:
            message: The payload to check.

        Raises:
            ValueError: If the message is longer than max_payload.
        """
        if len(message) > self.max_payload():
            raise ValueError(f"Data must not be longer than {max(self.max_payload(), 0)} bytes for a "
                             f"{self.mod.bit_length()}-bit key")


class RSAPubKey(RSAKey):
    """Public RSA key: a modulus and a public exponent.

    Provides the two public-key operations: PKCS#1 v1.5 encryption and raw signature verification.
    """

    def enc_pkcs1v15(self, message: bytes) -> bytes:
        """Encrypts the message according to RSAES-PKCS1-v1_5.

        EM = 0x00 || 0x02 || PS || 0x00 || M, with PS random non-zero octets.

        Args:
            message: Message to be encrypted.

        Returns:
            The ciphertext, exactly bsize bytes long.

        Raises:
            ValueError: If the message does not fit a single block.
        """
        self._check_payload(message)
        ps = nonzero_bytes(self.bsize - len(message) - 3)
        em = bytes_to_integer(b"\x00\x02" + ps + b"\x00" + message)
        return integer_to_bytes(self.c_rsa(em), self.bsize)

    def verify_raw(self, message: bytes, signature: bytes) -> bool:
        """Verifies a raw (digest-less) PKCS#1 v1.5 signature.

        The message is compared as-is against the recovered block; no DigestInfo is expected. Signatures shorter
        than the modulus are taken as having lost their leading zero octets.

        Args:
            message: The exact bytes that were signed.
            signature: The signature to check, at most bsize bytes long.

        Returns:
            True if the signature matches the message, False otherwise.

        Raises:
            ValueError: If the signature is longer than the modulus.
        """
        if len(signature) > self.bsize:
            raise ValueError(f"Signature must not be longer than {self.bsize} bytes")
        if len(message) > self.max_payload():
            return False
        try:
            recovered = integer_to_bytes(self.c_rsa(bytes_to_integer(signature)), self.bsize)
        except ValueError:
            return False
        return hmac.compare_digest(recovered, type1_block(message, self.bsize))


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Keeps the CRT components when they are available and consistent with the modulus, and uses them to speed
    up the private operation. The public key is not stored; it is derived on demand from the modulus and the
    public exponent.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub_exp: The public exponent, None when the encoding did not carry one.
        p: Private Prime 1.
        q: Private Prime 2.
    """

    def __init__(self,
                 mod: int,
                 pub_exp: int | None,
                 priv_exp: int,
                 p: int | None = None,
                 q: int | None = None,
                 exp1: int | None = None,
                 exp2: int | None = None,
                 coeff: int | None = None) -> None:
        """Initialize the RSA Private Key.

        Args:
            mod: The modulus of the keypair.
            pub_exp: The public exponent of the key. Zero is treated as absent.
            priv_exp: The private exponent of the key.
            p: The private prime 1.
            q: The private prime 2.
            exp1: CRT Component dmp1.
            exp2: CRT Component dmq1.
            coeff: CRT Component iqmp.
        """
        super().__init__(mod, priv_exp)
        self.pub_exp: int | None = pub_exp or None
        self.p: int | None = None
        self.q: int | None = None
        self.exp1: int | None = None
        self.exp2: int | None = None
        self.coeff: int | None = None
        if p and q and p * q == mod:
            self.p = p
            self.q = q
            self.exp1 = exp1 or priv_exp % (p - 1)
            self.exp2 = exp2 or priv_exp % (q - 1)
            self.coeff = coeff or pow(q, -1, p)

    def public_key(self) -> RSAPubKey:
        """Derives the matching public key from the modulus and public exponent.

        Raises:
            KeyDerivationError: If the private key carries no public exponent.
        """
        if not self.pub_exp:
            raise KeyDerivationError("Private key does not carry a public exponent; cannot derive public key.")
        return RSAPubKey(self.mod, self.pub_exp)

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation accelerated with CRT. (Decrypt/Sign)

        Args:
            message: The int-marshalled message.

        Returns:
            The transformed message representative.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not self.p or not self.q:
            return super().c_rsa(message)
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        m_1 = pow(message, self.exp1, self.p)
        m_2 = pow(message, self.exp2, self.q)
        h = ((m_1 - m_2) * self.coeff) % self.p
        return m_2 + self.q * h

    def dec_pkcs1v15(self, ciphertext: bytes) -> bytes:
        """Decrypts the message according to RSAES-PKCS1-v1_5.

        The whole block is inspected before deciding on validity.

        Args:
            ciphertext: Ciphertext of at most bsize bytes.

        Returns:
            Decrypted message.

        Raises:
            ValueError: If the ciphertext is too long or out of range for the key.
            PaddingError: If the decrypted block is not validly padded.
        """
        if len(ciphertext) > self.bsize:
            raise ValueError(f"Data must not be longer than {self.bsize} bytes")
        em = integer_to_bytes(self.c_rsa(bytes_to_integer(ciphertext)), self.bsize)
        valid = em[0:2] == b"\x00\x02"
        mrkr = None
        for by in range(2, len(em)):
            if em[by] == 0 and mrkr is None:
                mrkr = by
        if mrkr is None or mrkr < 2 + MIN_PADDING or not valid:
            raise PaddingError("Decryption error.")
        return em[mrkr + 1:]

    def sign_raw(self, message: bytes) -> bytes:
        """Signs the exact message bytes with PKCS#1 v1.5 type 1 padding and no digest.

        Callers are expected to hash beforehand; whatever is given is what gets signed.

        Args:
            message: The bytes to sign, at most bsize - 11 long.

        Returns:
            The signature, exactly bsize bytes long.

        Raises:
            ValueError: If the message does not fit a single block.
        """
        self._check_payload(message)
        em = bytes_to_integer(type1_block(message, self.bsize))
        return integer_to_bytes(self.c_rsa(em), self.bsize)


class KeyKind(enum.Enum):
    """Which half of a key pair a decoded key is.

    Attributes:
        PUBLIC: Modulus and public exponent only.
        PRIVATE: Private exponent present; the public key may be derivable.
    """
    PUBLIC = "public"
    PRIVATE = "private"


class ResolvedKey(typing.NamedTuple):
    """A decoded key, tagged with its kind and the encoding it came from."""
    kind: KeyKind
    key: RSAPubKey | RSAPrivKey
    source: str


def _decode_exact(der: bytes, asn1_spec):
    """DER-decode against an ASN.1 type, rejecting trailing data."""
    value, rest = decoder.decode(der, asn1Spec=asn1_spec)
    if rest:
        raise error.PyAsn1Error("Trailing data after DER structure")
    return value


def _check_rsa_algorithm(algo, what: str) -> None:
    if algo["algorithm"] != rfc8017.rsaEncryption:
        raise UnsupportedKeyTypeError(f"{what} algorithm {algo['algorithm'].prettyPrint()} is not RSA.")


def _private_from_pkcs1(der: bytes) -> RSAPrivKey:
    keydata = _decode_exact(der, rfc8017.RSAPrivateKey())
    if keydata["version"] != 0:
        raise UnsupportedKeyTypeError("Multi-prime keys are not supported.")
    return RSAPrivKey(int(keydata["modulus"]), int(keydata["publicExponent"]), int(keydata["privateExponent"]),
                      int(keydata["prime1"]), int(keydata["prime2"]), int(keydata["exponent1"]),
                      int(keydata["exponent2"]), int(keydata["coefficient"]))


def _public_from_pkcs1(der: bytes) -> RSAPubKey:
    keydata = _decode_exact(der, rfc8017.RSAPublicKey())
    return RSAPubKey(int(keydata["modulus"]), int(keydata["publicExponent"]))


def _from_pkcs8(der: bytes) -> ResolvedKey:
    decdata = _decode_exact(der, rfc5208.PrivateKeyInfo())
    if decdata["version"] != 0:
        raise KeyParseError("Unsupported version of private key information wrapper")
    _check_rsa_algorithm(decdata["privateKeyAlgorithm"], "Private key")
    return ResolvedKey(KeyKind.PRIVATE, _private_from_pkcs1(decdata["privateKey"].asOctets()), "PKCS8")


def _from_spki(der: bytes) -> ResolvedKey:
    decdata = _decode_exact(der, rfc5280.SubjectPublicKeyInfo())
    _check_rsa_algorithm(decdata["algorithm"], "Public key")
    return ResolvedKey(KeyKind.PUBLIC, _public_from_pkcs1(decdata["subjectPublicKey"].asOctets()), "SPKI")


def _from_pkcs1_private(der: bytes) -> ResolvedKey:
    return ResolvedKey(KeyKind.PRIVATE, _private_from_pkcs1(der), "PKCS1")


def _from_pkcs1_public(der: bytes) -> ResolvedKey:
    return ResolvedKey(KeyKind.PUBLIC, _public_from_pkcs1(der), "PKCS1")


# The four structures are mutually exclusive at the ASN.1 level, so the order only affects speed.
DER_DECODERS = (_from_pkcs8, _from_spki, _from_pkcs1_private, _from_pkcs1_public)


def decode_der(der: bytes, label: str = "") -> ResolvedKey:
    """Decodes a DER key payload into a tagged key.

    The structure is identified from the DER itself; the PEM label is only consulted to reject encrypted keys.

    Args:
        der: The DER payload of a PEM block.
        label: The PEM label the payload came from.

    Returns:
        The resolved key.

    Raises:
        KeyParseError: If the payload is none of the supported key structures.
        UnsupportedKeyTypeError: If the payload is a key this service cannot use.
    """
    if label == "ENCRYPTED PRIVATE KEY":
        raise UnsupportedKeyTypeError("Encrypted private keys are not supported.")
    for fun in DER_DECODERS:
        try:
            resolved = fun(der)
        except error.PyAsn1Error:
            continue
        if resolved.key.mod <= 0 or resolved.key.expo <= 0:
            raise KeyParseError("Key has a non-positive modulus or exponent")
        log.debug("Decoded %s %s RSA key (%d bits)", resolved.source, resolved.kind.value,
                  resolved.key.mod.bit_length())
        return resolved
    raise KeyParseError("Payload is not a PKCS#1, PKCS#8 or X.509 RSA key")


def type1_block(message: bytes, size: int) -> bytes:
    """Builds the PKCS#1 v1.5 signature block 0x00 || 0x01 || 0xFF.. || 0x00 || M."""
    return b"\x00\x01" + b"\xff" * (size - len(message) - 3) + b"\x00" + message


def nonzero_bytes(length: int) -> bytes:
    """Random bytes with no zero octet, for encryption padding."""
    out = b""
    while len(out) < length:
        out += token_bytes(length - len(out)).replace(b"\x00", b"")
    return out


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer (OS2IP).

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a fixed-length byte string (I2OSP).

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)
