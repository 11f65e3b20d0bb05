"""Error types raised while parsing and verifying certificates and CRLs."""

from __future__ import annotations

import enum


class DerTypeId(enum.Enum):
    """Names the DER type in which trailing data was found."""

    BIT_STRING = "BitString"
    BOOL = "Bool"
    CERTIFICATE = "Certificate"
    CERTIFICATE_EXTENSIONS = "CertificateExtensions"
    CERTIFICATE_TBS_CERTIFICATE = "CertificateTbsCertificate"
    CERT_REVOCATION_LIST = "CertRevocationList"
    CERT_REVOCATION_LIST_EXTENSION = "CertRevocationListExtension"
    CRL_DISTRIBUTION_POINT = "CrlDistributionPoint"
    COMMON_NAME_INNER = "CommonNameInner"
    COMMON_NAME_OUTER = "CommonNameOuter"
    DISTRIBUTION_POINT_NAME = "DistributionPointName"
    EXTENSION = "Extension"
    GENERAL_NAME = "GeneralName"
    REVOCATION_REASON = "RevocationReason"
    SIGNATURE = "Signature"
    SIGNATURE_ALGORITHM = "SignatureAlgorithm"
    SIGNED_DATA = "SignedData"
    SUBJECT_PUBLIC_KEY_INFO = "SubjectPublicKeyInfo"
    TIME = "Time"
    TRUST_ANCHOR_V1 = "TrustAnchorV1"
    TRUST_ANCHOR_V1_TBS_CERTIFICATE = "TrustAnchorV1TbsCertificate"
    U8 = "U8"
    REVOKED_CERTIFICATE = "RevokedCertificate"
    REVOKED_CERTIFICATE_EXTENSION = "RevokedCertificateExtension"
    REVOKED_CERT_ENTRY = "RevokedCertEntry"
    ISSUING_DISTRIBUTION_POINT = "IssuingDistributionPoint"


class ErrorKind(enum.Enum):
    """The kinds of failure that certificate or name validation can report."""

    BAD_DER = "BadDer"
    BAD_DER_TIME = "BadDerTime"
    CA_USED_AS_END_ENTITY = "CaUsedAsEndEntity"
    CERT_EXPIRED = "CertExpired"
    CERT_NOT_VALID_FOR_NAME = "CertNotValidForName"
    CERT_NOT_VALID_YET = "CertNotValidYet"
    CERT_REVOKED = "CertRevoked"
    END_ENTITY_USED_AS_CA = "EndEntityUsedAsCa"
    EXTENSION_VALUE_INVALID = "ExtensionValueInvalid"
    INVALID_CERT_VALIDITY = "InvalidCertValidity"
    INVALID_CRL_NUMBER = "InvalidCrlNumber"
    INVALID_NETWORK_MASK_CONSTRAINT = "InvalidNetworkMaskConstraint"
    INVALID_SERIAL_NUMBER = "InvalidSerialNumber"
    INVALID_CRL_SIGNATURE_FOR_PUBLIC_KEY = "InvalidCrlSignatureForPublicKey"
    INVALID_SIGNATURE_FOR_PUBLIC_KEY = "InvalidSignatureForPublicKey"
    ISSUER_NOT_CRL_SIGNER = "IssuerNotCrlSigner"
    MALFORMED_DNS_IDENTIFIER = "MalformedDnsIdentifier"
    MALFORMED_EXTENSIONS = "MalformedExtensions"
    MALFORMED_NAME_CONSTRAINT = "MalformedNameConstraint"
    MAXIMUM_SIGNATURE_CHECKS_EXCEEDED = "MaximumSignatureChecksExceeded"
    NAME_CONSTRAINT_VIOLATION = "NameConstraintViolation"
    PATH_LEN_CONSTRAINT_VIOLATED = "PathLenConstraintViolated"
    REQUIRED_EKU_NOT_FOUND = "RequiredEkuNotFound"
    SIGNATURE_ALGORITHM_MISMATCH = "SignatureAlgorithmMismatch"
    TRAILING_DATA = "TrailingData"
    UNKNOWN_ISSUER = "UnknownIssuer"
    UNKNOWN_REVOCATION_STATUS = "UnknownRevocationStatus"
    UNSUPPORTED_CERT_VERSION = "UnsupportedCertVersion"
    UNSUPPORTED_CRITICAL_EXTENSION = "UnsupportedCriticalExtension"
    UNSUPPORTED_CRL_ISSUING_DISTRIBUTION_POINT = "UnsupportedCrlIssuingDistributionPoint"
    UNSUPPORTED_CRL_VERSION = "UnsupportedCrlVersion"
    UNSUPPORTED_DELTA_CRL = "UnsupportedDeltaCrl"
    UNSUPPORTED_INDIRECT_CRL = "UnsupportedIndirectCrl"
    UNSUPPORTED_REVOCATION_REASON = "UnsupportedRevocationReason"
    UNSUPPORTED_REVOCATION_REASONS_PARTITIONING = "UnsupportedRevocationReasonsPartitioning"
    UNSUPPORTED_CRL_SIGNATURE_ALGORITHM = "UnsupportedCrlSignatureAlgorithm"
    UNSUPPORTED_SIGNATURE_ALGORITHM = "UnsupportedSignatureAlgorithm"
    UNSUPPORTED_CRL_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY = (
        "UnsupportedCrlSignatureAlgorithmForPublicKey"
    )
    UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY = "UnsupportedSignatureAlgorithmForPublicKey"


# Higher ranks are more useful to an end user than lower ones.
_RANKS: dict[ErrorKind, int] = {
    # Certificate validity.
    ErrorKind.CERT_NOT_VALID_YET: 29,
    ErrorKind.CERT_EXPIRED: 29,
    ErrorKind.CERT_NOT_VALID_FOR_NAME: 28,
    ErrorKind.CERT_REVOKED: 27,
    ErrorKind.UNKNOWN_REVOCATION_STATUS: 27,
    ErrorKind.INVALID_CRL_SIGNATURE_FOR_PUBLIC_KEY: 26,
    ErrorKind.INVALID_SIGNATURE_FOR_PUBLIC_KEY: 26,
    ErrorKind.SIGNATURE_ALGORITHM_MISMATCH: 25,
    ErrorKind.REQUIRED_EKU_NOT_FOUND: 24,
    ErrorKind.NAME_CONSTRAINT_VIOLATION: 23,
    ErrorKind.PATH_LEN_CONSTRAINT_VIOLATED: 22,
    ErrorKind.CA_USED_AS_END_ENTITY: 21,
    ErrorKind.END_ENTITY_USED_AS_CA: 21,
    ErrorKind.ISSUER_NOT_CRL_SIGNER: 20,
    # Supported features used in an invalid way.
    ErrorKind.INVALID_CERT_VALIDITY: 19,
    ErrorKind.INVALID_NETWORK_MASK_CONSTRAINT: 18,
    ErrorKind.INVALID_SERIAL_NUMBER: 17,
    ErrorKind.INVALID_CRL_NUMBER: 16,
    # Unsupported features.
    ErrorKind.UNSUPPORTED_CRL_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY: 15,
    ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY: 15,
    ErrorKind.UNSUPPORTED_CRL_SIGNATURE_ALGORITHM: 14,
    ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM: 14,
    ErrorKind.UNSUPPORTED_CRITICAL_EXTENSION: 13,
    ErrorKind.UNSUPPORTED_CERT_VERSION: 13,
    ErrorKind.UNSUPPORTED_CRL_VERSION: 12,
    ErrorKind.UNSUPPORTED_DELTA_CRL: 11,
    ErrorKind.UNSUPPORTED_INDIRECT_CRL: 10,
    ErrorKind.UNSUPPORTED_REVOCATION_REASON: 9,
    ErrorKind.UNSUPPORTED_REVOCATION_REASONS_PARTITIONING: 8,
    ErrorKind.UNSUPPORTED_CRL_ISSUING_DISTRIBUTION_POINT: 7,
    # Malformed data.
    ErrorKind.MALFORMED_DNS_IDENTIFIER: 6,
    ErrorKind.MALFORMED_NAME_CONSTRAINT: 5,
    ErrorKind.MALFORMED_EXTENSIONS: 4,
    ErrorKind.TRAILING_DATA: 4,
    ErrorKind.EXTENSION_VALUE_INVALID: 3,
    # Generic DER errors.
    ErrorKind.BAD_DER_TIME: 2,
    ErrorKind.BAD_DER: 1,
    # Not subject to ranking.
    ErrorKind.MAXIMUM_SIGNATURE_CHECKS_EXCEEDED: 0,
    ErrorKind.UNKNOWN_ISSUER: 0,
}


class PkiError(Exception):
    """Raised when certificate, CRL or name validation fails.

    Errors compare equal when they have the same kind and, for trailing-data
    errors, the same DER type.
    """

    def __init__(self, kind: ErrorKind, type_id: DerTypeId | None = None) -> None:
        if not isinstance(kind, ErrorKind):
            raise TypeError(f"expected an ErrorKind, got {kind!r}")
        if (kind is ErrorKind.TRAILING_DATA) != (type_id is not None):
            raise ValueError("a DER type is given with, and only with, TrailingData")
        if type_id is not None and not isinstance(type_id, DerTypeId):
            raise TypeError(f"expected a DerTypeId, got {type_id!r}")
        self.kind = kind
        self.type_id = type_id
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.type_id is None:
            return self.kind.value
        return f"{self.kind.value}({self.type_id.value})"

    def __str__(self) -> str:
        return self._describe()

    def __repr__(self) -> str:
        return f"PkiError({self._describe()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PkiError):
            return NotImplemented
        return (self.kind, self.type_id) == (other.kind, other.type_id)

    def __hash__(self) -> int:
        return hash((self.kind, self.type_id))

    def __reduce__(self):
        return (type(self), (self.kind, self.type_id))

    def rank(self) -> int:
        """How specific the error is; higher is more useful to a user."""
        return _RANKS[self.kind]

    def most_specific(self, new: PkiError) -> PkiError:
        """Return the more specific of this error and `new`, preferring this one on ties."""
        return self if self.rank() >= new.rank() else new


def trailing_data(type_id: DerTypeId) -> PkiError:
    """Build the error for trailing data found while parsing `type_id`."""
    return PkiError(ErrorKind.TRAILING_DATA, type_id)