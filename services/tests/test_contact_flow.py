from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from contact_flow_stream.contact_flow import extract_audio_stream

_STREAM_ARN = (
    "arn:aws:kinesisvideo:ap-northeast-1:123456789012:"
    "stream/connect-contact-abc123/1591234567890"
)


def _contact_event(audio: dict) -> dict:
    return {
        "Name": "ContactFlowEvent",
        "Details": {
            "ContactData": {
                "ContactId": "abc123",
                "MediaStreams": {"Customer": {"Audio": audio}},
            },
        },
    }


def test_audio_stream_name_and_start_are_extracted() -> None:
    event = _contact_event(
        {
            "StartFragmentNumber": "91343852333181432392682062622220590765191907586",
            "StartTimestamp": "1591234567890",
            "StreamARN": _STREAM_ARN,
        }
    )

    info = extract_audio_stream(event)

    assert info is not None
    assert info.stream_name == "connect-contact-abc123"
    assert info.start_timestamp == datetime(2020, 6, 4, 1, 36, 7, 890000, tzinfo=timezone.utc)


def test_numeric_start_timestamp_is_accepted() -> None:
    info = extract_audio_stream(_contact_event({"StartTimestamp": 1000, "StreamARN": _STREAM_ARN}))

    assert info is not None
    assert info.start_timestamp == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)


def test_missing_start_timestamp_reads_as_epoch() -> None:
    info = extract_audio_stream(_contact_event({"StreamARN": _STREAM_ARN}))

    assert info is not None
    assert info.start_timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_event_without_media_streams_has_no_audio_stream() -> None:
    assert extract_audio_stream({"Details": {"ContactData": {"ContactId": "abc123"}}}) is None
    assert extract_audio_stream({"contactId": "abc123"}) is None
    assert extract_audio_stream(["not", "an", "object"]) is None


def test_empty_stream_arn_has_no_audio_stream() -> None:
    assert extract_audio_stream(_contact_event({"StreamARN": ""})) is None


def test_arn_without_stream_segment_has_no_audio_stream() -> None:
    assert extract_audio_stream(_contact_event({"StreamARN": "arn:aws:kinesisvideo"})) is None
    assert extract_audio_stream(_contact_event({"StreamARN": "arn:aws:kinesisvideo:x//1"})) is None


def test_negative_start_timestamp_is_parsed_from_text_and_numbers() -> None:
    from_text = extract_audio_stream(
        _contact_event({"StartTimestamp": "-1000", "StreamARN": _STREAM_ARN})
    )
    from_number = extract_audio_stream(
        _contact_event({"StartTimestamp": -1000, "StreamARN": _STREAM_ARN})
    )

    expected = datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert from_text is not None and from_text.start_timestamp == expected
    assert from_number is not None and from_number.start_timestamp == expected


@pytest.mark.parametrize(
    "start_timestamp",
    [
        "99999999999999999999",
        "-99999999999999999999",
        "12abc",
        10**30,
        1e300,
        float("inf"),
        float("-inf"),
        float("nan"),
        True,
    ],
)
def test_unusable_start_timestamp_reads_as_epoch(start_timestamp: object) -> None:
    info = extract_audio_stream(
        _contact_event({"StartTimestamp": start_timestamp, "StreamARN": _STREAM_ARN})
    )

    assert info is not None
    assert info.stream_name == "connect-contact-abc123"
    assert info.start_timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_out_of_range_timestamp_from_json_text_reads_as_epoch() -> None:
    event = json.loads(
        '{"Details":{"ContactData":{"MediaStreams":{"Customer":{"Audio":'
        '{"StartTimestamp":Infinity,"StreamARN":"' + _STREAM_ARN + '"}}}}}}'
    )

    info = extract_audio_stream(event)

    assert info is not None
    assert info.start_timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)
