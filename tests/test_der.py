import pytest

from pkipath.der import Reader, Tag, read_all
from pkipath.errors import ErrorKind, PkiError


def tlv(tag, value):
    length = len(value)
    if length < 0x80:
        header = bytes([length])
    else:
        raw = length.to_bytes((length.bit_length() + 7) // 8, "big")
        header = bytes([0x80 | len(raw)]) + raw
    return bytes([tag]) + header + value


def time_tag(text):
    return Tag.UTC_TIME if len(text) == 13 else Tag.GENERALIZED_TIME


def time_value(text):
    return Reader(tlv(time_tag(text), text.encode())).read_time()


def expect_kind(kind, func, *args):
    with pytest.raises(PkiError) as info:
        func(*args)
    assert info.value.kind is kind


def test_short_form_element():
    reader = Reader(tlv(Tag.OCTET_STRING, b"abc"))
    assert reader.read_tag_and_value() == (Tag.OCTET_STRING, b"abc")
    assert reader.at_end()


def test_long_form_element():
    payload = bytes(range(200))
    reader = Reader(tlv(Tag.OCTET_STRING, payload))
    tag, value = reader.read_tag_and_value()
    assert tag == Tag.OCTET_STRING
    assert value == payload


@pytest.mark.parametrize(
    "encoded",
    [
        bytes([0x04, 0x81, 0x05]) + b"12345",  # long form for short length
        bytes([0x04, 0x82, 0x00, 0x90]) + bytes(0x90),  # leading zero length byte
        bytes([0x04, 0x80, 0x00, 0x00]),  # indefinite length
        bytes([0x04, 0x05, 0x01]),  # truncated value
        bytes([0x1F, 0x01, 0x00]),  # high tag number
        bytes([0x04]),  # missing length
        b"",
    ],
)
def test_malformed_elements(encoded):
    expect_kind(ErrorKind.BAD_DER, Reader(encoded).read_tag_and_value)


def test_expect_tag_mismatch():
    reader = Reader(tlv(Tag.INTEGER, b"\x01"))
    expect_kind(ErrorKind.BAD_DER, reader.expect_tag, Tag.OID)


def test_expect_tag_returns_value():
    reader = Reader(tlv(Tag.OID, b"\x55\x1d") + tlv(Tag.NULL, b""))
    assert reader.expect_tag(Tag.OID) == b"\x55\x1d"
    assert not reader.at_end()
    assert reader.expect_tag(Tag.NULL) == b""
    assert reader.at_end()


def test_absent_bool_defaults_false_without_consuming():
    reader = Reader(tlv(Tag.INTEGER, b"\x02"))
    assert reader.read_bool() is False
    assert reader.read_small_nonnegative_integer() == 2


def test_bool_values():
    assert Reader(tlv(Tag.BOOLEAN, b"\xff")).read_bool() is True
    assert Reader(tlv(Tag.BOOLEAN, b"\x00")).read_bool() is False
    expect_kind(ErrorKind.BAD_DER, Reader(tlv(Tag.BOOLEAN, b"\x01")).read_bool)
    expect_kind(ErrorKind.BAD_DER, Reader(tlv(Tag.BOOLEAN, b"\xff\xff")).read_bool)


def test_small_integers():
    assert Reader(tlv(Tag.INTEGER, b"\x05")).read_small_nonnegative_integer() == 5
    assert Reader(tlv(Tag.INTEGER, b"\x00")).read_small_nonnegative_integer() == 0
    assert Reader(tlv(Tag.INTEGER, b"\x00\xff")).read_small_nonnegative_integer() == 0xFF


@pytest.mark.parametrize(
    "value", [b"", b"\xff", b"\x00\x05", b"\x01\x00", b"\x00\x01\x00"]
)
def test_bad_small_integers(value):
    reader = Reader(tlv(Tag.INTEGER, value))
    expect_kind(ErrorKind.BAD_DER, reader.read_small_nonnegative_integer)


def test_epoch_times():
    assert time_value("700101000000Z") == 0
    assert time_value("19700101000000Z") == 0


def test_one_day_apart():
    assert time_value("700102000000Z") - time_value("700101000000Z") == 86400
    assert time_value("20000301000000Z") - time_value("20000229000000Z") == 86400


def test_utc_and_generalized_agree():
    assert time_value("491231235959Z") == time_value("20491231235959Z")
    assert time_value("990615120000Z") == time_value("19990615120000Z")


def test_times_are_ordered():
    stamps = ["19850101000000Z", "20100615101010Z", "20240229235959Z", "20500101000000Z"]
    values = [time_value(s) for s in stamps]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


@pytest.mark.parametrize(
    "text",
    [
        "500101000000Z",  # 1950, before the epoch
        "20001301000000Z",
        "20000230000000Z",
        "21000229000000Z",
        "20000101240000Z",
        "20000101006000Z",
        "20000101000060Z",
        "20000101000000",
        "2000010100000Z0",
        "2000A101000000Z",
        "20000101000000+",
    ],
)
def test_bad_times(text):
    reader = Reader(tlv(time_tag(text), text.encode()))
    with pytest.raises(PkiError) as info:
        reader.read_time()
    assert info.value.kind is ErrorKind.BAD_DER_TIME


def test_time_with_wrong_length_rejected():
    reader = Reader(tlv(Tag.GENERALIZED_TIME, b"2000010100000Z"))
    expect_kind(ErrorKind.BAD_DER_TIME, reader.read_time)


def test_time_with_wrong_tag_is_bad_der():
    reader = Reader(tlv(Tag.INTEGER, b"700101000000Z"))
    expect_kind(ErrorKind.BAD_DER, reader.read_time)


def test_read_all_rejects_trailing_data():
    data = tlv(Tag.NULL, b"") + b"\x00"
    with pytest.raises(PkiError) as info:
        read_all(data, lambda r: r.expect_tag(Tag.NULL))
    assert info.value.kind is ErrorKind.BAD_DER


def test_read_all_returns_result():
    data = tlv(Tag.OCTET_STRING, b"xyz")
    assert read_all(data, lambda r: r.expect_tag(Tag.OCTET_STRING)) == b"xyz"


def test_read_all_with_none_passes_none():
    seen = []
    result = read_all(None, lambda r: seen.append(r) or "absent")
    assert result == "absent"
    assert seen == [None]


def test_skip_to_end():
    reader = Reader(tlv(Tag.OID, b"\x2a") + tlv(Tag.OID, b"\x2b"))
    reader.expect_tag(Tag.OID)
    assert not reader.at_end()
    reader.skip_to_end()
    assert reader.at_end()
    expect_kind(ErrorKind.BAD_DER, reader.read_tag_and_value)