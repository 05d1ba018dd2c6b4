"""Extended key usage requirements and their checking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, Iterator, Optional, Union

from pkipath.der import Reader, Tag
from pkipath.errors import ErrorKind, PkiError

# id-kp-serverAuth, OID 1.3.6.1.5.5.7.3.1, as encoded contents.
EKU_SERVER_AUTH = bytes([0x2B, 0x06, 0x01, 0x05, 0x05, 0x07, 0x03, 0x01])
# id-kp-clientAuth, OID 1.3.6.1.5.5.7.3.2, as encoded contents.
EKU_CLIENT_AUTH = bytes([0x2B, 0x06, 0x01, 0x05, 0x05, 0x07, 0x03, 0x02])

BytesLike = Union[bytes, bytearray, memoryview]


def decode_oid(encoded: BytesLike) -> Iterator[int]:
    """Yield the arcs of the encoded contents of an OBJECT IDENTIFIER.

    The first encoded value is split into the first two arcs. A value left
    unfinished at the end of the input is dropped.
    """
    first = True
    cur = 0
    for byte in bytes(encoded):
        cur = (cur << 8) + (byte & 0x7F)
        if byte & 0x80:
            continue
        if first:
            first = False
            if cur <= 39:
                yield 0
                yield cur
            elif cur <= 79:
                yield 1
                yield cur - 40
            else:
                yield 2
                yield cur - 80
        else:
            yield cur
        cur = 0


def _format_arcs(arcs: Iterable[int]) -> str:
    return "KeyPurposeId(" + ".".join(str(arc) for arc in arcs) + ")"


@dataclass(frozen=True)
class KeyPurposeId:
    """An OID naming an extended key usage purpose."""

    oid_value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "oid_value", bytes(self.oid_value))

    def __repr__(self) -> str:
        return _format_arcs(decode_oid(self.oid_value))


@dataclass(frozen=True)
class KeyUsage:
    """The extended key usage an end-entity certificate is expected to carry.

    When ``only_if_present`` is true, a certificate without the EKU extension
    is accepted; otherwise the extension must be present and name the purpose.
    """

    purpose: KeyPurposeId
    only_if_present: bool = False

    SERVER_AUTH_REPR: ClassVar[tuple[int, ...]] = (1, 3, 6, 1, 5, 5, 7, 3, 1)
    CLIENT_AUTH_REPR: ClassVar[tuple[int, ...]] = (1, 3, 6, 1, 5, 5, 7, 3, 2)

    @classmethod
    def server_auth(cls) -> KeyUsage:
        """Usage for server authentication; the EKU extension is optional."""
        return cls.required_if_present(EKU_SERVER_AUTH)

    @classmethod
    def client_auth(cls) -> KeyUsage:
        """Usage for client authentication; the EKU extension is optional."""
        return cls.required_if_present(EKU_CLIENT_AUTH)

    @classmethod
    def required(cls, oid: BytesLike) -> KeyUsage:
        """Require the certificate to list the purpose ``oid``."""
        return cls(KeyPurposeId(bytes(oid)), only_if_present=False)

    @classmethod
    def required_if_present(cls, oid: BytesLike) -> KeyUsage:
        """Require the purpose ``oid`` only when the certificate lists any EKUs."""
        return cls(KeyPurposeId(bytes(oid)), only_if_present=True)

    def oid_values(self) -> Iterator[int]:
        """Yield the arcs of the required purpose's OID."""
        return decode_oid(self.purpose.oid_value)

    def check(self, value: Optional[Reader]) -> bool:
        """Check the contents of a certificate's EKU extension.

        ``value`` reads the OIDs of the extension, or is None when the
        certificate has no EKU extension. Returns True when the purpose was
        found and False when the extension is absent but not required.
        """
        if value is None:
            if self.only_if_present:
                return False
            raise self._not_found(())

        present: list[tuple[int, ...]] = []
        while True:
            oid = value.expect_tag(Tag.OID)
            if oid == self.purpose.oid_value:
                value.skip_to_end()
                return True
            present.append(tuple(decode_oid(oid)))
            if value.at_end():
                raise self._not_found(present)

    def _not_found(self, present: Iterable[Iterable[int]]) -> RequiredEkuNotFoundError:
        return RequiredEkuNotFoundError(
            RequiredEkuNotFoundContext(required=self, present=tuple(present))
        )

    def __repr__(self) -> str:
        mode = "RequiredIfPresent" if self.only_if_present else "Required"
        return f"KeyUsage({mode}({self.purpose!r}))"


@dataclass(frozen=True)
class RequiredEkuNotFoundContext:
    """The required usage and the usages a certificate listed instead."""

    required: KeyUsage
    present: tuple[tuple[int, ...], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "present", tuple(tuple(arcs) for arcs in self.present)
        )

    def __repr__(self) -> str:
        present = ", ".join(_format_arcs(arcs) for arcs in self.present)
        return (
            f"RequiredEkuNotFoundContext {{ required: {self.required.purpose!r}, "
            f"present: [{present}] }}"
        )


class RequiredEkuNotFoundError(PkiError):
    """The certificate does not carry the required extended key usage."""

    def __init__(self, context: RequiredEkuNotFoundContext) -> None:
        self.context = context
        super().__init__(ErrorKind.REQUIRED_EKU_NOT_FOUND, context)

    def __str__(self) -> str:
        return f"RequiredEkuNotFoundContext({self.context!r})"