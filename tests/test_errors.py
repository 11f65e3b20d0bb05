import pickle

import pytest

from pkiverify.errors import DerTypeId, ErrorKind, PkiError, trailing_data


def test_every_kind_has_a_rank():
    for kind in ErrorKind:
        if kind is ErrorKind.TRAILING_DATA:
            err = trailing_data(DerTypeId.U8)
        else:
            err = PkiError(kind)
        assert err.rank() >= 0


def test_pinned_ranks():
    assert PkiError(ErrorKind.BAD_DER).rank() == 1
    assert PkiError(ErrorKind.CERT_EXPIRED).rank() == 29
    assert PkiError(ErrorKind.UNKNOWN_ISSUER).rank() == 0


def test_trailing_data_ranks_like_malformed_extensions():
    assert trailing_data(DerTypeId.CERTIFICATE).rank() == PkiError(
        ErrorKind.MALFORMED_EXTENSIONS
    ).rank()


def test_most_specific_picks_higher_rank():
    low = PkiError(ErrorKind.BAD_DER)
    high = PkiError(ErrorKind.CERT_NOT_VALID_YET)
    assert low.most_specific(high) is high
    assert high.most_specific(low) is high


def test_most_specific_prefers_self_on_tie():
    first = PkiError(ErrorKind.CERT_EXPIRED)
    second = PkiError(ErrorKind.CERT_NOT_VALID_YET)
    assert first.most_specific(second) is first
    assert second.most_specific(first) is second


def test_equality_includes_type_id():
    assert trailing_data(DerTypeId.BIT_STRING) == trailing_data(DerTypeId.BIT_STRING)
    assert trailing_data(DerTypeId.BIT_STRING) != trailing_data(DerTypeId.SIGNED_DATA)
    assert PkiError(ErrorKind.BAD_DER) == PkiError(ErrorKind.BAD_DER)
    assert PkiError(ErrorKind.BAD_DER) != PkiError(ErrorKind.BAD_DER_TIME)
    assert len({PkiError(ErrorKind.BAD_DER), PkiError(ErrorKind.BAD_DER)}) == 1


def test_str_matches_variant_names():
    assert str(PkiError(ErrorKind.BAD_DER)) == "BadDer"
    assert str(trailing_data(DerTypeId.BIT_STRING)) == "TrailingData(BitString)"


def test_can_be_raised_and_caught():
    err = PkiError(ErrorKind.UNSUPPORTED_DELTA_CRL)
    assert err.rank() == 11
    assert str(err) == "UnsupportedDeltaCrl"
    with pytest.raises(PkiError) as info:
        raise err
    assert info.value == PkiError(ErrorKind.UNSUPPORTED_DELTA_CRL)
    assert info.value.kind is ErrorKind.UNSUPPORTED_DELTA_CRL
    assert info.value.type_id is None


def test_trailing_data_requires_type_id():
    with pytest.raises(ValueError):
        PkiError(ErrorKind.TRAILING_DATA)


def test_type_id_only_with_trailing_data():
    with pytest.raises(ValueError):
        PkiError(ErrorKind.BAD_DER, DerTypeId.U8)


def test_kind_must_be_error_kind():
    with pytest.raises(TypeError):
        PkiError("BadDer")


def test_pickle_round_trip():
    err = trailing_data(DerTypeId.REVOKED_CERT_ENTRY)
    restored = pickle.loads(pickle.dumps(err))
    assert restored == err
    assert restored.type_id is DerTypeId.REVOKED_CERT_ENTRY