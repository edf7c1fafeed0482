from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from contact_flow_stream.models import AudioStreamInfo

LOGGER = logging.getLogger(__name__)

_AUDIO_PATH = ("Details", "ContactData", "MediaStreams", "Customer", "Audio")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def extract_audio_stream(event: Any) -> AudioStreamInfo | None:
    """Locate the customer audio stream in an Amazon Connect contact flow event.

    Kinesis Video stream ARNs look like
    ``arn:aws:kinesisvideo:<region>:<account>:stream/<stream-name>/<code>``; the
    stream name is the second slash-separated segment. Returns None when the
    event carries no usable audio stream.
    """
    audio = _lookup(event, _AUDIO_PATH)

    stream_arn = audio.get("StreamARN") if isinstance(audio, dict) else None
    if not isinstance(stream_arn, str) or not stream_arn:
        LOGGER.warning("audio_stream_arn_missing")
        return None

    parts = stream_arn.split("/")
    if len(parts) < 2 or not parts[1]:
        LOGGER.warning("audio_stream_name_missing", extra={"stream_arn": stream_arn})
        return None

    return AudioStreamInfo(
        stream_name=parts[1],
        start_timestamp=_epoch_millis_to_datetime(audio.get("StartTimestamp")),
    )


def _lookup(node: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _epoch_millis_to_datetime(value: Any) -> datetime:
    millis = 0
    if isinstance(value, bool):
        pass
    elif isinstance(value, int):
        millis = value
    elif isinstance(value, float):
        if math.isfinite(value):
            millis = int(value)
    elif isinstance(value, str):
        try:
            millis = int(value.strip())
        except ValueError:
            millis = 0

    try:
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        LOGGER.warning("audio_start_timestamp_out_of_range", extra={"start_timestamp": value})
        return _EPOCH
