from __future__ import annotations

import pytest

from ovms_exporter.exceptions import OvmsDecodeError
from ovms_exporter.models.record import parse_records
from ovms_exporter.schema import MessageType


def test_parse_records_maps_wire_names() -> None:
    body = b'[{"h_data": " 1,2,3 ", "h_recordnumber": 4, "h_timestamp": "2023-11-14 22:13:20", "h_extra": true}]'

    (record,) = parse_records(body)

    assert record.data == " 1,2,3 "
    assert record.record_number == 4
    assert record.timestamp == "2023-11-14 22:13:20"
    assert record.message_type is None


def test_parse_records_tags_message_type() -> None:
    body = '[{"h_data": "80", "h_recordnumber": 1, "h_timestamp": "2023-11-14 22:13:20"}]'

    records = parse_records(body, message_type=MessageType.STATUS)

    assert [r.message_type for r in records] == [MessageType.STATUS]


def test_parse_records_accepts_empty_array() -> None:
    assert parse_records(b"[]") == []


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b'{"h_data": "1"}',
        b'[{"h_recordnumber": 1, "h_timestamp": "2023-11-14 22:13:20"}]',
        b'[{"h_data": "1", "h_timestamp": "2023-11-14 22:13:20"}]',
        b'[{"h_data": ["1"], "h_timestamp": "2023-11-14 22:13:20"}]',
        b'["1,2,3"]',
        b"\xff\xfe",
    ],
)
def test_parse_records_rejects_unexpected_shapes(body: bytes) -> None:
    with pytest.raises(OvmsDecodeError):
        parse_records(body)
