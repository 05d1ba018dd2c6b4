"""Checks of a certificate that do not depend on its issuer, and work budgets."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from pkipath.certificate import Cert
from pkipath.der import Reader, read_all
from pkipath.eku import KeyUsage
from pkipath.errors import CertExpiredError, CertNotValidYetError, ErrorKind, PkiError


class Role(enum.Enum):
    """The position a certificate takes in a path."""

    ISSUER = "issuer"
    END_ENTITY = "end_entity"


@dataclass
class Budget:
    """Limits on the work one path-building attempt may do."""

    signatures: int = 100
    build_chain_calls: int = 200_000
    name_constraint_comparisons: int = 250_000

    def consume_signature(self) -> None:
        """Use up one signature check."""
        if self.signatures <= 0:
            raise PkiError(ErrorKind.MAXIMUM_SIGNATURE_CHECKS_EXCEEDED)
        self.signatures -= 1

    def consume_build_chain_call(self) -> None:
        """Use up one recursive path-building step."""
        if self.build_chain_calls <= 0:
            raise PkiError(ErrorKind.MAXIMUM_PATH_BUILD_CALLS_EXCEEDED)
        self.build_chain_calls -= 1

    def consume_name_constraint_comparison(self) -> None:
        """Use up one name constraint comparison."""
        if self.name_constraint_comparisons <= 0:
            raise PkiError(ErrorKind.MAXIMUM_NAME_CONSTRAINT_COMPARISONS_EXCEEDED)
        self.name_constraint_comparisons -= 1


def check_validity(value: Reader, time: int) -> tuple[int, int]:
    """Check that ``time`` lies within a Validity's notBefore and notAfter.

    Returns the two bounds as seconds since the Unix epoch.
    """
    not_before = value.read_time()
    not_after = value.read_time()

    if not_before > not_after:
        raise PkiError(ErrorKind.INVALID_CERT_VALIDITY)
    if time < not_before:
        raise CertNotValidYetError(time, not_before)
    if time > not_after:
        raise CertExpiredError(time, not_after)
    return not_before, not_after


def check_basic_constraints(
    value: Optional[Reader], role: Role, sub_ca_count: int
) -> tuple[bool, Optional[int]]:
    """Check BasicConstraints against the role a certificate plays.

    ``value`` reads the constraint's contents, or is None when the extension
    is absent. Returns whether the certificate is a CA and its path length
    constraint.
    """
    if value is None:
        is_ca, path_len = False, None
    else:
        is_ca = value.read_bool()
        # Some real end-entity certificates carry pathLenConstraint, so it
        # is accepted whatever cA says.
        path_len = None if value.at_end() else value.read_small_nonnegative_integer()

    if role is Role.END_ENTITY and is_ca:
        raise PkiError(ErrorKind.CA_USED_AS_END_ENTITY)
    if role is Role.ISSUER and not is_ca:
        raise PkiError(ErrorKind.END_ENTITY_USED_AS_CA)
    if role is Role.ISSUER and path_len is not None and sub_ca_count > path_len:
        raise PkiError(ErrorKind.PATH_LEN_CONSTRAINT_VIOLATED)
    return is_ca, path_len


def check_issuer_independent_properties(
    cert: Cert, time: int, role: Role, sub_ca_count: int, eku: KeyUsage
) -> None:
    """Check validity, basic constraints and extended key usage of ``cert``."""
    read_all(cert.validity, lambda reader: check_validity(reader, time))
    read_all(
        cert.basic_constraints,
        lambda reader: check_basic_constraints(reader, role, sub_ca_count),
    )
    read_all(cert.eku, eku.check)