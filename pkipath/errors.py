"""Errors raised while parsing certificates and building certification paths."""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(enum.Enum):
    """The kinds of failure that parsing and path validation can report."""

    CERT_NOT_VALID_YET = "CertNotValidYet"
    CERT_EXPIRED = "CertExpired"
    CERT_REVOKED = "CertRevoked"
    INVALID_SIGNATURE_FOR_PUBLIC_KEY = "InvalidSignatureForPublicKey"
    REQUIRED_EKU_NOT_FOUND = "RequiredEkuNotFound"
    NAME_CONSTRAINT_VIOLATION = "NameConstraintViolation"
    PATH_LEN_CONSTRAINT_VIOLATED = "PathLenConstraintViolated"
    CA_USED_AS_END_ENTITY = "CaUsedAsEndEntity"
    END_ENTITY_USED_AS_CA = "EndEntityUsedAsCa"
    INVALID_CERT_VALIDITY = "InvalidCertValidity"
    UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY = "UnsupportedSignatureAlgorithmForPublicKey"
    UNSUPPORTED_SIGNATURE_ALGORITHM = "UnsupportedSignatureAlgorithm"
    UNSUPPORTED_CRITICAL_EXTENSION = "UnsupportedCriticalExtension"
    BAD_DER = "BadDer"
    BAD_DER_TIME = "BadDerTime"
    TRAILING_DATA = "TrailingData"
    EXTENSION_VALUE_INVALID = "ExtensionValueInvalid"
    UNKNOWN_ISSUER = "UnknownIssuer"
    MAXIMUM_SIGNATURE_CHECKS_EXCEEDED = "MaximumSignatureChecksExceeded"
    MAXIMUM_PATH_BUILD_CALLS_EXCEEDED = "MaximumPathBuildCallsExceeded"
    MAXIMUM_NAME_CONSTRAINT_COMPARISONS_EXCEEDED = "MaximumNameConstraintComparisonsExceeded"
    MAXIMUM_PATH_DEPTH_EXCEEDED = "MaximumPathDepthExceeded"


# Higher rank means a more specific, more useful error to report.
_RANK = {
    ErrorKind.CERT_NOT_VALID_YET: 290,
    ErrorKind.CERT_EXPIRED: 290,
    ErrorKind.CERT_REVOKED: 270,
    ErrorKind.INVALID_SIGNATURE_FOR_PUBLIC_KEY: 260,
    ErrorKind.REQUIRED_EKU_NOT_FOUND: 240,
    ErrorKind.NAME_CONSTRAINT_VIOLATION: 230,
    ErrorKind.PATH_LEN_CONSTRAINT_VIOLATED: 220,
    ErrorKind.CA_USED_AS_END_ENTITY: 210,
    ErrorKind.END_ENTITY_USED_AS_CA: 210,
    ErrorKind.INVALID_CERT_VALIDITY: 190,
    ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM_FOR_PUBLIC_KEY: 150,
    ErrorKind.UNSUPPORTED_SIGNATURE_ALGORITHM: 140,
    ErrorKind.UNSUPPORTED_CRITICAL_EXTENSION: 130,
    ErrorKind.BAD_DER: 50,
    ErrorKind.BAD_DER_TIME: 40,
    ErrorKind.TRAILING_DATA: 30,
    ErrorKind.EXTENSION_VALUE_INVALID: 20,
    ErrorKind.UNKNOWN_ISSUER: 10,
    ErrorKind.MAXIMUM_SIGNATURE_CHECKS_EXCEEDED: 0,
    ErrorKind.MAXIMUM_PATH_BUILD_CALLS_EXCEEDED: 0,
    ErrorKind.MAXIMUM_NAME_CONSTRAINT_COMPARISONS_EXCEEDED: 0,
    ErrorKind.MAXIMUM_PATH_DEPTH_EXCEEDED: 0,
}

# Errors that must stop path building altogether rather than move on
# to the next candidate issuer.
_FATAL = frozenset(
    {
        ErrorKind.MAXIMUM_SIGNATURE_CHECKS_EXCEEDED,
        ErrorKind.MAXIMUM_PATH_BUILD_CALLS_EXCEEDED,
        ErrorKind.MAXIMUM_NAME_CONSTRAINT_COMPARISONS_EXCEEDED,
    }
)


class PkiError(Exception):
    """A certificate parsing or validation failure of a given kind."""

    def __init__(self, kind: ErrorKind, detail: Any = None) -> None:
        self.kind = kind
        self.detail = detail
        message = kind.value if detail is None else f"{kind.value}({detail!r})"
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        """Whether this error halts path building instead of trying other paths."""
        return self.kind in _FATAL

    @property
    def rank(self) -> int:
        """How specific this error is; higher is more specific."""
        return _RANK[self.kind]

    def most_specific(self, other: PkiError) -> PkiError:
        """Return the more specific of two errors, preferring ``other`` on a tie."""
        return other if self.rank <= other.rank else self

    def _key(self) -> tuple:
        return (type(self), self.kind, self.detail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PkiError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class CertNotValidYetError(PkiError):
    """The certificate's validity period starts after the checked time."""

    def __init__(self, time: int, not_before: int) -> None:
        self.time = time
        self.not_before = not_before
        super().__init__(ErrorKind.CERT_NOT_VALID_YET, (time, not_before))

    def __str__(self) -> str:
        return f"CertNotValidYet {{ time: {self.time}, not_before: {self.not_before} }}"


class CertExpiredError(PkiError):
    """The certificate's validity period ended before the checked time."""

    def __init__(self, time: int, not_after: int) -> None:
        self.time = time
        self.not_after = not_after
        super().__init__(ErrorKind.CERT_EXPIRED, (time, not_after))

    def __str__(self) -> str:
        return f"CertExpired {{ time: {self.time}, not_after: {self.not_after} }}"