# pkiverify

`pkiverify` is a small, strict toolkit for the parts of Web PKI certificate
handling that deal with raw bytes. It reads DER, takes apart the
"tbs || signatureAlgorithm || signature" structure that X.509 certificates,
CRLs and OCSP responses share, and checks signatures against a
SubjectPublicKeyInfo.

It is deliberately unforgiving. Lengths must use their canonical encoding.
High tag numbers are refused. Integers may not carry unneeded leading zeros.
Bit strings must be padded correctly. When input breaks a rule, the package
raises `PkiError` rather than guessing what was meant.

## Installation

```
pip install pkiverify
```

Signature checks use the `cryptography` package, which is installed as a
dependency.

## What is inside

- `pkiverify.errors`
  - `PkiError` is the single exception raised for malformed or unacceptable
    input. Its `ErrorKind` says what went wrong.
  - `DerTypeId` names the structure that had trailing data.
  - `trailing_data(type_id)` builds the error for that case.
  - `PkiError.rank()` orders errors by how specific they are.
    `PkiError.most_specific(new)` keeps the more useful of two errors.
- `pkiverify.der`
  - `Reader` is a cursor over bytes.
  - Tag-length-value reading: `read_tag_and_get_value`,
    `read_tag_and_get_value_limited`, `expect_tag` and
    `expect_tag_and_get_value_limited`.
  - Nested decoding: `nested`, `nested_limited` and `nested_of`.
  - `read_all` runs a decoder over bytes and demands that every byte is used.
  - `iter_der` yields values parsed one after another from a buffer.
- `pkiverify.der_values`
  - Typed readers for ASN.1 primitives: `read_u8`, `read_bool`,
    `nonnegative_integer` and `bit_string_with_no_unused_bits`.
  - `bit_string_flags` decodes a flag bit string into `BitStringFlags`.
- `pkiverify.signed_data`
  - `parse_signed_data` splits a signed structure into its to-be-signed
    contents and a `SignedData`.
  - `parse_spki` reads a `SubjectPublicKeyInfo`.
  - `verify_signed_data` picks a suitable algorithm from a list of
    `SignatureVerificationAlgorithm` objects and verifies the signature.
  - `verify_signature` checks one signature with one algorithm.
  - `AlgorithmIdentifier.matches` compares an encoded algorithm identifier.
- `pkiverify.algorithms`
  - `CryptographyAlgorithm` implements `SignatureVerificationAlgorithm` for
    ECDSA, RSA PKCS#1, RSA-PSS and Ed25519, using `cryptography`.

## Example: key-usage style flags

```python
from pkiverify.der_values import bit_string_flags

# One bit of padding, then a byte with bits 5 and 6 set.
flags = bit_string_flags(bytes([0x01, 0x06]))
assert flags.bit_set(5)
assert flags.bit_set(6)
assert not flags.bit_set(7)
assert not flags.bit_set(256)  # bits beyond the data read as unset
```

## Verifying signed data

`verify_signed_data(supported_algorithms, spki_value, signed_data)` tries each
supported algorithm whose signature algorithm identifier matches the one in
`signed_data`.

- If a matching algorithm also matches the key type in the SPKI, its result is
  final: the function returns on success, or raises `PkiError` when the
  signature is invalid.
- If some algorithms match the signature algorithm but none match the key, it
  raises an error that says the signature algorithm does not fit this public
  key.
- If no algorithm matches the signature algorithm at all, it raises an error
  that says the signature algorithm is unsupported.

## Size limits

By default, DER values are limited to lengths below 65535 bytes, which is
what a two-byte long-form length can express. The `*_limited` functions
accept a larger limit, up to values with four-byte lengths.