"""X.509 extension and distribution point structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from pkipath.der import CONSTRUCTED, CONTEXT_SPECIFIC, Reader, Tag
from pkipath.errors import ErrorKind, PkiError

T = TypeVar("T")

# id-ce: the arc for standard certificate and CRL extensions, OID 2.5.29.
_ID_CE = bytes([0x55, 0x1D])

_FULL_NAME_TAG = CONTEXT_SPECIFIC | CONSTRUCTED
_NAME_RELATIVE_TO_CRL_ISSUER_TAG = CONTEXT_SPECIFIC | CONSTRUCTED | 1


@dataclass(frozen=True)
class Extension:
    """A single certificate or CRL extension."""

    id: bytes
    critical: bool
    value: bytes

    @classmethod
    def from_reader(cls, reader: Reader) -> Extension:
        """Parse the contents of an Extension SEQUENCE."""
        oid = reader.expect_tag(Tag.OID)
        critical = reader.read_bool()
        value = reader.expect_tag(Tag.OCTET_STRING)
        return cls(id=oid, critical=critical, value=value)

    def check_unsupported(self) -> None:
        """Reject this extension if it is critical, since it is not understood."""
        if self.critical:
            raise PkiError(ErrorKind.UNSUPPORTED_CRITICAL_EXTENSION)


def set_extension_once(current: Optional[T], parser: Callable[[], T]) -> T:
    """Parse an extension value that must not already have been seen."""
    if current is not None:
        raise PkiError(ErrorKind.EXTENSION_VALUE_INVALID)
    return parser()


def remember_extension(extension: Extension, handler: Callable[[int], T]) -> Optional[T]:
    """Hand a standard extension's final OID octet to ``handler``.

    Extensions outside the id-ce arc are ignored unless critical.
    """
    if len(extension.id) != len(_ID_CE) + 1 or not extension.id.startswith(_ID_CE):
        extension.check_unsupported()
        return None
    return handler(extension.id[-1])


@dataclass(frozen=True)
class DistributionPointName:
    """A CRL distribution point name.

    ``full_name`` holds the encoded GeneralNames of a full name; it is None
    when the name is relative to the CRL issuer.
    """

    full_name: Optional[bytes] = None

    @property
    def is_relative_to_crl_issuer(self) -> bool:
        """Whether the name is given relative to the CRL issuer."""
        return self.full_name is None

    @classmethod
    def from_reader(cls, reader: Reader) -> DistributionPointName:
        """Parse a DistributionPointName CHOICE."""
        tag, value = reader.read_tag_and_value()
        if tag == _FULL_NAME_TAG:
            return cls(full_name=value)
        if tag == _NAME_RELATIVE_TO_CRL_ISSUER_TAG:
            return cls(full_name=None)
        raise PkiError(ErrorKind.BAD_DER)