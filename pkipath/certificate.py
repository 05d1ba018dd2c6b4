"""Parsed certificate and trust anchor records used in path building."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _as_bytes(name: str, value: object, optional: bool) -> Optional[bytes]:
    if value is None and optional:
        return None
    if not isinstance(value, _BYTES_LIKE):
        raise TypeError(f"{name} must be bytes-like, not {type(value).__name__}")
    return bytes(value)


class _BytesRecord:
    """Normalises every bytes-like field of a frozen dataclass to ``bytes``."""

    _optional: frozenset = frozenset()

    def __post_init__(self) -> None:
        for field in fields(self):  # type: ignore[arg-type]
            value = getattr(self, field.name)
            if isinstance(value, SignedData):
                continue
            normalised = _as_bytes(field.name, value, field.name in self._optional)
            object.__setattr__(self, field.name, normalised)


@dataclass(frozen=True)
class SignedData(_BytesRecord):
    """Data together with the algorithm and signature that cover it."""

    data: bytes
    algorithm: bytes
    signature: bytes


@dataclass(frozen=True)
class Cert(_BytesRecord):
    """The parts of a certificate that path validation looks at.

    Each field holds the DER contents of the corresponding certificate element;
    the optional extension fields are None when the extension is absent.
    """

    der: bytes
    issuer: bytes
    subject: bytes
    spki: bytes
    signed_data: SignedData
    validity: bytes
    serial: bytes = b""
    basic_constraints: Optional[bytes] = None
    eku: Optional[bytes] = None
    name_constraints: Optional[bytes] = None
    key_usage: Optional[bytes] = None

    _optional = frozenset({"basic_constraints", "eku", "name_constraints", "key_usage"})

    def __post_init__(self) -> None:
        if not isinstance(self.signed_data, SignedData):
            raise TypeError("signed_data must be a SignedData")
        super().__post_init__()


@dataclass(frozen=True)
class TrustAnchor(_BytesRecord):
    """A trusted subject name and public key, optionally with name constraints."""

    subject: bytes
    subject_public_key_info: bytes
    name_constraints: Optional[bytes] = None

    _optional = frozenset({"name_constraints"})