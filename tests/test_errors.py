import pytest

from pkipath.errors import CertExpiredError, CertNotValidYetError, ErrorKind, PkiError

FATAL_KINDS = {
    ErrorKind.MAXIMUM_SIGNATURE_CHECKS_EXCEEDED,
    ErrorKind.MAXIMUM_PATH_BUILD_CALLS_EXCEEDED,
    ErrorKind.MAXIMUM_NAME_CONSTRAINT_COMPARISONS_EXCEEDED,
}


def test_more_specific_new_error_wins():
    old = PkiError(ErrorKind.UNKNOWN_ISSUER)
    new = CertExpiredError(10, 5)
    assert old.most_specific(new) is new


def test_less_specific_new_error_loses():
    old = CertNotValidYetError(1, 2)
    new = PkiError(ErrorKind.BAD_DER)
    assert old.most_specific(new) is old


def test_equal_rank_prefers_new_error():
    old = PkiError(ErrorKind.CA_USED_AS_END_ENTITY)
    new = PkiError(ErrorKind.END_ENTITY_USED_AS_CA)
    assert old.most_specific(new) is new


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_fatal_kinds(kind):
    assert PkiError(kind).is_fatal == (kind in FATAL_KINDS)


@pytest.mark.parametrize(
    "kind", [k for k in ErrorKind if not k.name.startswith("MAXIMUM_")]
)
def test_budget_errors_never_displace_others(kind):
    old = PkiError(kind)
    new = PkiError(ErrorKind.MAXIMUM_PATH_DEPTH_EXCEEDED)
    assert old.most_specific(new) is old


def test_unknown_issuer_ranks_above_budget_errors():
    old = PkiError(ErrorKind.MAXIMUM_PATH_DEPTH_EXCEEDED)
    new = PkiError(ErrorKind.UNKNOWN_ISSUER)
    assert old.most_specific(new) is new
    assert new.rank > old.rank


def test_equality_and_hashing():
    assert PkiError(ErrorKind.BAD_DER) == PkiError(ErrorKind.BAD_DER)
    assert PkiError(ErrorKind.BAD_DER) != PkiError(ErrorKind.BAD_DER_TIME)
    assert CertExpiredError(1, 2) == CertExpiredError(1, 2)
    assert CertExpiredError(1, 2) != CertExpiredError(1, 3)
    assert PkiError(ErrorKind.CERT_EXPIRED) != CertExpiredError(1, 2)
    errors = {PkiError(ErrorKind.BAD_DER), PkiError(ErrorKind.BAD_DER), CertExpiredError(1, 2)}
    assert len(errors) == 2


def test_time_errors_carry_fields():
    with pytest.raises(CertNotValidYetError) as info:
        raise CertNotValidYetError(time=3, not_before=7)
    assert info.value.time == 3
    assert info.value.not_before == 7
    assert info.value.kind is ErrorKind.CERT_NOT_VALID_YET

    expired = CertExpiredError(time=9, not_after=4)
    assert expired.not_after == 4
    assert expired.kind is ErrorKind.CERT_EXPIRED


def test_errors_are_catchable_as_pki_error():
    err = CertExpiredError(2, 1)
    assert err.kind is ErrorKind.CERT_EXPIRED
    assert err.time == 2
    assert err.not_after == 1
    with pytest.raises(PkiError) as info:
        raise err
    assert info.value is err
    assert info.value.kind is ErrorKind.CERT_EXPIRED