"""Signed structures ("tbs || signatureAlgorithm || signature") and their verification."""

from __future__ import annotations

import abc
from dataclasses import dataclass

from pkiverify.der import (
    Reader,
    Tag,
    expect_tag,
    expect_tag_and_get_value_limited,
    read_all,
)
from pkiverify.der_values import bit_string_with_no_unused_bits
from pkiverify.errors import DerTypeId, ErrorKind, PkiError, trailing_data


@dataclass(frozen=True)
class AlgorithmIdentifier:
    """The contents of a PKIX AlgorithmIdentifier, without the outer SEQUENCE.

    This is the encoded algorithm OID followed by the encoded parameters, if
    any. The bytes are not validated.
    """

    asn1_id_value: bytes

    def matches(self, encoded: bytes) -> bool:
        """True when `encoded` is exactly this identifier's encoding."""
        return bytes(encoded) == self.asn1_id_value


_OID_EC_PUBLIC_KEY = bytes.fromhex("06072a8648ce3d0201")
_RSA_PSS_OID = bytes.fromhex("06092a864886f70d01010a")

#: id-ecPublicKey with named curve secp256r1.
ECDSA_P256 = AlgorithmIdentifier(_OID_EC_PUBLIC_KEY + bytes.fromhex("06082a8648ce3d030107"))

#: id-ecPublicKey with named curve secp384r1.
ECDSA_P384 = AlgorithmIdentifier(_OID_EC_PUBLIC_KEY + bytes.fromhex("06052b81040022"))

#: ecdsa-with-SHA256.
ECDSA_SHA256 = AlgorithmIdentifier(bytes.fromhex("06082a8648ce3d040302"))

#: ecdsa-with-SHA384.
ECDSA_SHA384 = AlgorithmIdentifier(bytes.fromhex("06082a8648ce3d040303"))

#: rsaEncryption.
RSA_ENCRYPTION = AlgorithmIdentifier(bytes.fromhex("06092a864886f70d0101010500"))

#: sha256WithRSAEncryption.
RSA_PKCS1_SHA256 = AlgorithmIdentifier(bytes.fromhex("06092a864886f70d01010b0500"))

#: sha384WithRSAEncryption.
RSA_PKCS1_SHA384 = AlgorithmIdentifier(bytes.fromhex("06092a864886f70d01010c0500"))

#: sha512WithRSAEncryption.
RSA_PKCS1_SHA512 = AlgorithmIdentifier(bytes.fromhex("06092a864886f70d01010d0500"))


def _rsa_pss(hash_oid_last: int, salt_length: int) -> AlgorithmIdentifier:
    hash_alg = bytes.fromhex("300d06096086480165030402") + bytes([hash_oid_last]) + b"\x05\x00"
    mgf1 = bytes.fromhex("301a06092a864886f70d010108") + hash_alg
    params = (
        b"\xa0\x0f" + hash_alg
        + b"\xa1\x1c" + mgf1
        + b"\xa2\x03\x02\x01" + bytes([salt_length])
    )
    return AlgorithmIdentifier(_RSA_PSS_OID + b"\x30" + bytes([len(params)]) + params)


#: rsassaPss with SHA-256, MGF1 with SHA-256 and a 32-byte salt.
RSA_PSS_SHA256 = _rsa_pss(0x01, 32)

#: rsassaPss with SHA-384, MGF1 with SHA-384 and a 48-byte salt.
RSA_PSS_SHA384 = _rsa_pss(0x02, 48)

#: rsassaPss with SHA-512, MGF1 with SHA-512 and a 64-byte salt.
RSA_PSS_SHA512 = _rsa_pss(0x03, 64)

#: Ed25519.
ED25519 = AlgorithmIdentifier(bytes.fromhex("06032b6570"))


class InvalidSignature(Exception):
    """A signature did not verify; no further detail is given."""


class SignatureVerificationAlgorithm(abc.ABC):
    """One supported pairing of a public key type and a signature algorithm."""

    @abc.abstractmethod
    def public_key_alg_id(self) -> AlgorithmIdentifier:
        """The identifier a SubjectPublicKeyInfo must carry for this algorithm to apply."""

    @abc.abstractmethod
    def signature_alg_id(self) -> AlgorithmIdentifier:
        """The identifier the signed data's signatureAlgorithm must carry."""

    @abc.abstractmethod
    def verify_signature(self, public_key: bytes, message: bytes, signature: bytes) -> None:
        """Check `signature` over the unhashed `message` with `public_key`.

        Raise InvalidSignature if it does not verify, including when the
        public key encoding is invalid.
        """


@dataclass(frozen=True)
class SignedData:
    """The signed bytes, the signature algorithm and the signature value."""

    data: bytes
    algorithm: bytes
    signature: bytes


@dataclass(frozen=True)
class SubjectPublicKeyInfo:
    """A public key's algorithm identifier contents and its key bits."""

    algorithm_id_value: bytes
    key_value: bytes


def parse_signed_data(reader: Reader, size_limit: int) -> tuple[bytes, SignedData]:
    """Parse "tbs || signatureAlgorithm || signature" from `reader`.

    The outermost SEQUENCE is not read. Returns the contents of the tbs
    SEQUENCE together with the SignedData, whose `data` is the whole encoded
    tbs SEQUENCE. The tbs SEQUENCE must be shorter than `size_limit`.
    """
    data, tbs = reader.read_partial(
        lambda inner: expect_tag_and_get_value_limited(inner, Tag.SEQUENCE, size_limit)
    )
    algorithm = expect_tag(reader, Tag.SEQUENCE)
    signature = bit_string_with_no_unused_bits(reader)
    return tbs, SignedData(data=data, algorithm=algorithm, signature=signature)


def parse_spki(reader: Reader) -> SubjectPublicKeyInfo:
    """Parse the contents of a SubjectPublicKeyInfo SEQUENCE."""
    algorithm_id_value = expect_tag(reader, Tag.SEQUENCE)
    key_value = bit_string_with_no_unused_bits(reader)
    return SubjectPublicKeyInfo(algorithm_id_value=algorithm_id_value, key_value=key_value)


def verify_signed_data(
    supported_algorithms: list[SignatureVerificationAlgorithm],
    spki_value: bytes,
    signed_data: SignedData,
) -> None:
    """Verify `signed_data` with the key in the SubjectPublicKeyInfo contents `spki_value`.

    Every supported algorithm whose signature identifier matches is tried in
    order. Raises UnsupportedSignatureAlgorithmForPublicKey when some matched
    but none fitted the key, and UnsupportedSignatureAlgorithm when none matched.
    """
    found_signature_alg_match = False
    for algorithm in supported_algorithms:
        if not algorithm.signature_alg_id().matches(signed_data.algorithm):
            continue
        try:
            verify_signature(algorithm, spki_value, signed_data.data, signed_data.signature)
        except PkiError as error:
            if error.kind is ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY:
                found_signature_alg_match = True
                continue
            raise
        return

    if found_signature_alg_match:
        raise PkiError(ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY)
    raise PkiError(ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM)


def verify_signature(
    signature_alg: SignatureVerificationAlgorithm,
    spki_value: bytes,
    msg: bytes,
    signature: bytes,
) -> None:
    """Verify `signature` over `msg` with one algorithm and the given key."""
    spki = read_all(spki_value, trailing_data(DerTypeId.SUBJECT_PUBLIC_KEY_INFO), parse_spki)
    if not signature_alg.public_key_alg_id().matches(spki.algorithm_id_value):
        raise PkiError(ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY)
    try:
        signature_alg.verify_signature(bytes(spki.key_value), bytes(msg), bytes(signature))
    except InvalidSignature:
        raise PkiError(ErrorKind.INVALID_SIGNATURE_FOR_PUBLIC_KEY) from None