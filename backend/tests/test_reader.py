import io

import numpy as np
import pytest

from gribreader.services.grib import (
    DataDecodeError,
    Grib1Reader,
    GribIOError,
    InvalidMessageLengthError,
    RotatedLatLon,
    SearchCriterion,
    TruncatedFileError,
    UnhandledRepresentation,
    WrongHeaderError,
    WrongVersionError,
    decode,
    extract_raw,
)

import grib_builder as gb
from conftest import T_RAW, U_RAW, V_RAW


def test_two_messages_in_file_order(two_messages):
    result = decode(io.BytesIO(two_messages), [(33, 700), (34, 700)])
    assert len(result) == 2
    assert result[0].pds.indicator_of_parameter_and_units == 33
    assert result[0].pds.level_or_layer_value == 700
    assert result[1].pds.indicator_of_parameter_and_units == 34
    assert result[1].pds.level_or_layer_value == 700


def test_result_order_follows_file_not_criteria(three_messages):
    result = decode(io.BytesIO(three_messages), [(11, 500), (34, 700), (33, 700)])
    assert [m.pds.parameter for m in result] == [33, 34, 11]


def test_decoded_values(two_messages):
    u, v = decode(io.BytesIO(two_messages), [(33, 700), (34, 700)])
    np.testing.assert_array_equal(u.bds.data, 16.0 + np.array(U_RAW) * 0.5)
    np.testing.assert_array_equal(v.bds.data, np.array(V_RAW) - 1.0)
    assert u.shape == (3, 2)
    assert isinstance(u.gds.data, RotatedLatLon)
    assert u.grid.latitude_of_first_grid_point == pytest.approx(-10.0)


def test_decimal_scale_applied_to_values(three_messages):
    (t,) = decode(io.BytesIO(three_messages), [(11, 500)])
    np.testing.assert_allclose(t.values, np.array(T_RAW) / 10.0)
    np.testing.assert_array_equal(t.bds.data, np.array(T_RAW, dtype=float))


def test_criteria_forms(three_messages):
    forms = [
        [SearchCriterion(34, 700)],
        [(34, 700)],
        [{"parameter": 34, "level": 700}],
    ]
    for criteria in forms:
        result = decode(io.BytesIO(three_messages), criteria)
        assert [m.pds.parameter for m in result] == [34]


def test_same_criterion_matches_every_message(three_messages):
    data = three_messages + gb.message(33, 700, raw=[1, 2], width=4, ni=2, nj=1)
    result = decode(io.BytesIO(data), [(33, 700)])
    assert len(result) == 2
    assert result[1].bds.data.tolist() == [1.0, 2.0]


def test_no_matches_is_empty(three_messages):
    assert decode(io.BytesIO(three_messages), [(99, 1)]) == []
    assert decode(io.BytesIO(three_messages), []) == []
    assert extract_raw(io.BytesIO(three_messages), [(99, 1)]) == b""


def test_empty_file():
    assert decode(io.BytesIO(b""), [(33, 700)]) == []


def test_raw_mode_length_equals_reported_length(two_messages):
    first_len = int.from_bytes(two_messages[4:7], "big")
    out = extract_raw(io.BytesIO(two_messages), [(33, 700)])
    assert len(out) == first_len
    assert out == two_messages[:first_len]


def test_raw_mode_concatenates_in_file_order(three_messages):
    stream = io.BytesIO(three_messages)
    messages = Grib1Reader(stream).scan()
    out = extract_raw(stream, [(11, 500), (33, 700)])
    first, third = messages[0], messages[2]
    assert out == (
        three_messages[first.offset:first.offset + first.length]
        + three_messages[third.offset:third.offset + third.length]
    )


def test_idempotent(three_messages):
    stream = io.BytesIO(three_messages)
    reader = Grib1Reader(stream)
    first = reader.read([(33, 700), (11, 500)])
    second = reader.read([(33, 700), (11, 500)])
    assert first == second
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.bds.data, b.bds.data)


def test_offsets_add_up_to_file_size(three_messages):
    messages = Grib1Reader(io.BytesIO(three_messages)).scan()
    assert len(messages) == 3
    assert sum(m.length for m in messages) == len(three_messages)
    offset = 0
    for m in messages:
        assert m.offset == offset
        offset += m.length


def test_scan_does_not_decode_data(three_messages):
    messages = Grib1Reader(io.BytesIO(three_messages)).scan()
    assert all(m.bds is None for m in messages)
    assert all(m.values is None for m in messages)


def test_wrong_header():
    data = gb.message(33, 700, magic=b"GRIX")
    with pytest.raises(WrongHeaderError):
        decode(io.BytesIO(data), [(33, 700)])


def test_wrong_header_after_valid_message(two_messages):
    with pytest.raises(WrongHeaderError):
        decode(io.BytesIO(two_messages + b"garbage!" * 4), [(33, 700)])


def test_wrong_version():
    data = gb.message(33, 700, edition=2)
    with pytest.raises(WrongVersionError) as excinfo:
        decode(io.BytesIO(data), [(33, 700)])
    assert excinfo.value.version == 2


def test_invalid_length():
    data = b"GRIB" + gb.u24(0) + b"\x01" + gb.pds(33, 700)
    with pytest.raises(InvalidMessageLengthError):
        decode(io.BytesIO(data), [(33, 700)])


def test_no_gds_no_bitmap_sections_absent():
    data = gb.message(33, 700, raw=[1, 2, 3], with_gds=False)
    (msg,) = decode(io.BytesIO(data), [(33, 700)])
    assert msg.gds is None
    assert msg.shape is None
    # sin GDS no hay cantidad de puntos: se desempaquetan cero valores
    assert msg.bds.data.size == 0


def test_bitmap_is_consumed(two_messages):
    (v,) = decode(io.BytesIO(two_messages), [(34, 700)])
    assert v.pds.has_bitmap
    assert v.bds.bits_per_value == 7


def test_unhandled_representation_does_not_stop_scan(two_messages):
    odd = gb.message(7, 500, raw=[1, 2], gds=gb.gds_unhandled(representation=4))
    data = odd + two_messages
    result = decode(io.BytesIO(data), [(7, 500), (34, 700)])
    assert [m.pds.parameter for m in result] == [7, 34]
    assert isinstance(result[0].gds.data, UnhandledRepresentation)
    assert result[0].gds.data_representation_type == 4
    assert result[0].bds.data.size == 0


def test_truncated_data_fails(two_messages):
    bad = gb.message(33, 700, raw=[1] * 6, width=12, ni=3, nj=2, truncate=4)
    with pytest.raises(DataDecodeError):
        decode(io.BytesIO(two_messages + bad), [(33, 700)])


def test_truncated_file(two_messages):
    data = two_messages[:-10]
    with pytest.raises(TruncatedFileError):
        decode(io.BytesIO(data), [(99, 1)])
    with pytest.raises(GribIOError):
        extract_raw(io.BytesIO(data), [(34, 700)])


def test_io_error_is_wrapped(two_messages):
    class BrokenStream(io.BytesIO):
        def read(self, *args):
            raise OSError("disk on fire")

    with pytest.raises(GribIOError):
        decode(BrokenStream(two_messages), [(33, 700)])


def test_decode_from_file(grib_file):
    with open(grib_file, "rb") as f:
        result = decode(f, [(33, 700), (34, 700)])
    assert [m.pds.parameter for m in result] == [33, 34]


def test_short_pds_in_file_is_decode_error():
    data = gb.raw_message(gb.short_section(5))
    with pytest.raises(DataDecodeError):
        decode(io.BytesIO(data), [(33, 700)])
    with pytest.raises(DataDecodeError):
        Grib1Reader(io.BytesIO(data)).scan()


def test_short_bds_in_file_is_decode_error():
    data = gb.raw_message(gb.pds(33, 700, flag=0) + gb.short_section(6))
    with pytest.raises(DataDecodeError):
        decode(io.BytesIO(data), [(33, 700)])


def test_scan_is_list_and_iter_messages_is_lazy(three_messages):
    reader = Grib1Reader(io.BytesIO(three_messages))
    assert isinstance(reader.scan(), list)
    it = reader.iter_messages(None, decode_data=False)
    assert next(it).pds.parameter == 33
