"""A small reader for the DER subset used by X.509 certificates."""

from __future__ import annotations

import datetime
import enum
from typing import Callable, Optional, TypeVar, Union

from pkipath.errors import ErrorKind, PkiError

T = TypeVar("T")

CONTEXT_SPECIFIC = 0x80
CONSTRUCTED = 0x20

_EPOCH_ORDINAL = datetime.date(1970, 1, 1).toordinal()
_SECONDS_PER_DAY = 86_400


class Tag(enum.IntEnum):
    """Universal DER tags."""

    BOOLEAN = 0x01
    INTEGER = 0x02
    BIT_STRING = 0x03
    OCTET_STRING = 0x04
    NULL = 0x05
    OID = 0x06
    UTC_TIME = 0x17
    GENERALIZED_TIME = 0x18
    SEQUENCE = CONSTRUCTED | 0x10


def _bad_der() -> PkiError:
    return PkiError(ErrorKind.BAD_DER)


def _bad_time() -> PkiError:
    return PkiError(ErrorKind.BAD_DER_TIME)


class Reader:
    """Sequential reader over a DER encoded byte string."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self._data = bytes(data)
        self._pos = 0

    def at_end(self) -> bool:
        """Whether every byte has been consumed."""
        return self._pos >= len(self._data)

    def skip_to_end(self) -> None:
        """Consume all remaining bytes."""
        self._pos = len(self._data)

    def _peek(self, tag: int) -> bool:
        return not self.at_end() and self._data[self._pos] == tag

    def _read_byte(self) -> int:
        if self.at_end():
            raise _bad_der()
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    def _read_bytes(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise _bad_der()
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def read_tag_and_value(self) -> tuple[int, bytes]:
        """Read one TLV element and return its tag byte and value bytes."""
        tag = self._read_byte()
        if tag & 0x1F == 0x1F:
            # High tag numbers are never used in certificates.
            raise _bad_der()

        first = self._read_byte()
        if first < 0x80:
            length = first
        else:
            count = first & 0x7F
            if count == 0 or count > 4:
                raise _bad_der()
            raw = self._read_bytes(count)
            if raw[0] == 0:
                raise _bad_der()
            length = int.from_bytes(raw, "big")
            if length < 0x80:
                raise _bad_der()
        return tag, self._read_bytes(length)

    def expect_tag(self, tag: int) -> bytes:
        """Read one element, which must carry ``tag``, and return its value."""
        actual, value = self.read_tag_and_value()
        if actual != int(tag):
            raise _bad_der()
        return value

    def read_bool(self) -> bool:
        """Read an optional BOOLEAN, which defaults to false when absent."""
        if not self._peek(Tag.BOOLEAN):
            return False
        value = self.expect_tag(Tag.BOOLEAN)
        if value == b"\xff":
            return True
        if value == b"\x00":
            return False
        raise _bad_der()

    def read_small_nonnegative_integer(self) -> int:
        """Read an INTEGER that must lie in the range 0 to 255."""
        value = self.expect_tag(Tag.INTEGER)
        if not value or value[0] & 0x80:
            raise _bad_der()
        if value[0] == 0 and len(value) > 1:
            if not value[1] & 0x80:
                raise _bad_der()
            value = value[1:]
        if len(value) != 1:
            raise _bad_der()
        return value[0]

    def read_time(self) -> int:
        """Read a UTCTime or GeneralizedTime as seconds since the Unix epoch."""
        is_utc = self._peek(Tag.UTC_TIME)
        value = self.expect_tag(Tag.UTC_TIME if is_utc else Tag.GENERALIZED_TIME)
        return _parse_time(value, is_utc)


def _digits(text: bytes, start: int, count: int) -> int:
    chunk = text[start:start + count]
    if len(chunk) != count or not all(0x30 <= b <= 0x39 for b in chunk):
        raise _bad_time()
    return int(chunk)


def _ranged(value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise _bad_time()
    return value


def _parse_time(value: bytes, is_utc: bool) -> int:
    if is_utc:
        if len(value) != 13:
            raise _bad_time()
        short_year = _digits(value, 0, 2)
        year = 1900 + short_year if short_year >= 50 else 2000 + short_year
        rest = 2
    else:
        if len(value) != 15:
            raise _bad_time()
        year = _digits(value, 0, 4)
        rest = 4

    month = _ranged(_digits(value, rest, 2), 1, 12)
    day = _digits(value, rest + 2, 2)
    hour = _ranged(_digits(value, rest + 4, 2), 0, 23)
    minute = _ranged(_digits(value, rest + 6, 2), 0, 59)
    second = _ranged(_digits(value, rest + 8, 2), 0, 59)
    if value[rest + 10:] != b"Z":
        raise _bad_time()
    if year < 1970:
        raise _bad_time()

    try:
        date = datetime.date(year, month, day)
    except ValueError:
        raise _bad_time() from None

    days = date.toordinal() - _EPOCH_ORDINAL
    return days * _SECONDS_PER_DAY + hour * 3600 + minute * 60 + second


def read_all(
    data: Optional[Union[bytes, bytearray, memoryview]],
    func: Callable[[Optional[Reader]], T],
) -> T:
    """Run ``func`` over all of ``data``, rejecting trailing bytes.

    When ``data`` is None, ``func`` is called with None instead of a reader.
    """
    if data is None:
        return func(None)
    reader = Reader(data)
    result = func(reader)
    if not reader.at_end():
        raise _bad_der()
    return result