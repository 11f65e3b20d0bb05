"""Signature verification algorithms backed by the `cryptography` library."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from pkiverify import signed_data as _ids
from pkiverify.der import Reader, Tag, nested, read_all
from pkiverify.der_values import nonnegative_integer
from pkiverify.errors import ErrorKind, PkiError
from pkiverify.signed_data import (
    AlgorithmIdentifier,
    InvalidSignature,
    SignatureVerificationAlgorithm,
)

_Verifier = Callable[[bytes, bytes, bytes], None]

# RSA key constraints.
_RSA_MAX_BITS = 8192
_RSA_MIN_EXPONENT = 3
_RSA_MAX_EXPONENT = (1 << 33) - 1

# Failures raised by `cryptography` that all mean "this signature does not verify".
_CRYPTO_FAILURES = (_CryptoInvalidSignature, ValueError, TypeError, UnsupportedAlgorithm)


def _verify_ecdsa(
    curve: ec.EllipticCurve,
    hash_algorithm: hashes.HashAlgorithm,
    public_key: bytes,
    message: bytes,
    signature: bytes,
) -> None:
    # Only the uncompressed point form is accepted.
    if not public_key or public_key[0] != 0x04:
        raise InvalidSignature()
    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(curve, public_key)
        key.verify(signature, message, ec.ECDSA(hash_algorithm))
    except _CRYPTO_FAILURES:
        raise InvalidSignature() from None


def _parse_rsa_public_key(public_key: bytes) -> tuple[int, int]:
    """Decode a PKCS#1 RSAPublicKey into (modulus, exponent)."""
    bad = PkiError(ErrorKind.BAD_DER)

    def decode_fields(reader: Reader) -> tuple[bytes, bytes]:
        return nonnegative_integer(reader), nonnegative_integer(reader)

    def decode(reader: Reader) -> tuple[bytes, bytes]:
        return nested(reader, Tag.SEQUENCE, bad, decode_fields)

    try:
        modulus, exponent = read_all(public_key, bad, decode)
    except PkiError:
        raise InvalidSignature() from None
    return int.from_bytes(modulus, "big"), int.from_bytes(exponent, "big")


def _load_rsa_key(public_key: bytes, min_bits: int) -> rsa.RSAPublicKey:
    n, e = _parse_rsa_public_key(public_key)
    if not min_bits <= n.bit_length() <= _RSA_MAX_BITS:
        raise InvalidSignature()
    if e < _RSA_MIN_EXPONENT or e > _RSA_MAX_EXPONENT or e % 2 == 0:
        raise InvalidSignature()
    try:
        return rsa.RSAPublicNumbers(e, n).public_key()
    except _CRYPTO_FAILURES:
        raise InvalidSignature() from None


def _verify_rsa_pkcs1(
    min_bits: int,
    hash_algorithm: hashes.HashAlgorithm,
    public_key: bytes,
    message: bytes,
    signature: bytes,
) -> None:
    key = _load_rsa_key(public_key, min_bits)
    try:
        key.verify(signature, message, padding.PKCS1v15(), hash_algorithm)
    except _CRYPTO_FAILURES:
        raise InvalidSignature() from None


def _verify_rsa_pss(
    min_bits: int,
    hash_algorithm: hashes.HashAlgorithm,
    public_key: bytes,
    message: bytes,
    signature: bytes,
) -> None:
    key = _load_rsa_key(public_key, min_bits)
    scheme = padding.PSS(
        mgf=padding.MGF1(hash_algorithm),
        salt_length=hash_algorithm.digest_size,
    )
    try:
        key.verify(signature, message, scheme, hash_algorithm)
    except _CRYPTO_FAILURES:
        raise InvalidSignature() from None


def _verify_ed25519(public_key: bytes, message: bytes, signature: bytes) -> None:
    try:
        key = ed25519.Ed25519PublicKey.from_public_bytes(public_key)
        key.verify(signature, message)
    except _CRYPTO_FAILURES:
        raise InvalidSignature() from None


@dataclass(frozen=True)
class CryptographyAlgorithm(SignatureVerificationAlgorithm):
    """A signature verification algorithm implemented with `cryptography`."""

    name: str
    public_key_algorithm: AlgorithmIdentifier
    signature_algorithm: AlgorithmIdentifier
    verifier: _Verifier = field(repr=False, compare=False)

    def public_key_alg_id(self) -> AlgorithmIdentifier:
        return self.public_key_algorithm

    def signature_alg_id(self) -> AlgorithmIdentifier:
        return self.signature_algorithm

    def verify_signature(self, public_key: bytes, message: bytes, signature: bytes) -> None:
        self.verifier(bytes(public_key), bytes(message), bytes(signature))


#: ECDSA signatures using the P-256 curve and SHA-256.
ECDSA_P256_SHA256 = CryptographyAlgorithm(
    "ECDSA_P256_SHA256",
    _ids.ECDSA_P256,
    _ids.ECDSA_SHA256,
    partial(_verify_ecdsa, ec.SECP256R1(), hashes.SHA256()),
)

#: ECDSA signatures using the P-256 curve and SHA-384. Deprecated.
ECDSA_P256_SHA384 = CryptographyAlgorithm(
    "ECDSA_P256_SHA384",
    _ids.ECDSA_P256,
    _ids.ECDSA_SHA384,
    partial(_verify_ecdsa, ec.SECP256R1(), hashes.SHA384()),
)

#: ECDSA signatures using the P-384 curve and SHA-256. Deprecated.
ECDSA_P384_SHA256 = CryptographyAlgorithm(
    "ECDSA_P384_SHA256",
    _ids.ECDSA_P384,
    _ids.ECDSA_SHA256,
    partial(_verify_ecdsa, ec.SECP384R1(), hashes.SHA256()),
)

#: ECDSA signatures using the P-384 curve and SHA-384.
ECDSA_P384_SHA384 = CryptographyAlgorithm(
    "ECDSA_P384_SHA384",
    _ids.ECDSA_P384,
    _ids.ECDSA_SHA384,
    partial(_verify_ecdsa, ec.SECP384R1(), hashes.SHA384()),
)

#: RSA PKCS#1 1.5 signatures using SHA-256 for keys of 2048-8192 bits.
RSA_PKCS1_2048_8192_SHA256 = CryptographyAlgorithm(
    "RSA_PKCS1_2048_8192_SHA256",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PKCS1_SHA256,
    partial(_verify_rsa_pkcs1, 2048, hashes.SHA256()),
)

#: RSA PKCS#1 1.5 signatures using SHA-384 for keys of 2048-8192 bits.
RSA_PKCS1_2048_8192_SHA384 = CryptographyAlgorithm(
    "RSA_PKCS1_2048_8192_SHA384",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PKCS1_SHA384,
    partial(_verify_rsa_pkcs1, 2048, hashes.SHA384()),
)

#: RSA PKCS#1 1.5 signatures using SHA-512 for keys of 2048-8192 bits.
RSA_PKCS1_2048_8192_SHA512 = CryptographyAlgorithm(
    "RSA_PKCS1_2048_8192_SHA512",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PKCS1_SHA512,
    partial(_verify_rsa_pkcs1, 2048, hashes.SHA512()),
)

#: RSA PKCS#1 1.5 signatures using SHA-384 for keys of 3072-8192 bits.
RSA_PKCS1_3072_8192_SHA384 = CryptographyAlgorithm(
    "RSA_PKCS1_3072_8192_SHA384",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PKCS1_SHA384,
    partial(_verify_rsa_pkcs1, 3072, hashes.SHA384()),
)

#: RSA PSS signatures using SHA-256 for rsaEncryption keys of 2048-8192 bits.
RSA_PSS_2048_8192_SHA256_LEGACY_KEY = CryptographyAlgorithm(
    "RSA_PSS_2048_8192_SHA256_LEGACY_KEY",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PSS_SHA256,
    partial(_verify_rsa_pss, 2048, hashes.SHA256()),
)

#: RSA PSS signatures using SHA-384 for rsaEncryption keys of 2048-8192 bits.
RSA_PSS_2048_8192_SHA384_LEGACY_KEY = CryptographyAlgorithm(
    "RSA_PSS_2048_8192_SHA384_LEGACY_KEY",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PSS_SHA384,
    partial(_verify_rsa_pss, 2048, hashes.SHA384()),
)

#: RSA PSS signatures using SHA-512 for rsaEncryption keys of 2048-8192 bits.
RSA_PSS_2048_8192_SHA512_LEGACY_KEY = CryptographyAlgorithm(
    "RSA_PSS_2048_8192_SHA512_LEGACY_KEY",
    _ids.RSA_ENCRYPTION,
    _ids.RSA_PSS_SHA512,
    partial(_verify_rsa_pss, 2048, hashes.SHA512()),
)

#: Ed25519 signatures as described for X.509 use.
ED25519 = CryptographyAlgorithm(
    "ED25519",
    _ids.ED25519,
    _ids.ED25519,
    _verify_ed25519,
)