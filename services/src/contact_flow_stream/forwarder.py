from __future__ import annotations

import json
import logging
from typing import Any

from contact_flow_stream.kinesis import KinesisClient
from contact_flow_stream.models import PublishResult, StreamRecord

LOGGER = logging.getLogger(__name__)

# The target stream has a single shard, so every record shares one key.
PARTITION_KEY = "SendContactFlowEventKey"


def serialize_event(event: Any) -> str:
    return json.dumps(event, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


class EventForwarder:
    """Publishes each event verbatim to a Kinesis stream with one PutRecord call.

    Serialization and publish failures propagate to the caller untouched and
    are never retried.
    """

    def __init__(self, *, client: KinesisClient, stream_name: str) -> None:
        if not stream_name:
            raise ValueError("stream_name must not be empty")

        self._client = client
        self._stream_name = stream_name

    def build_record(self, event: Any) -> StreamRecord:
        return StreamRecord(
            data=serialize_event(event),
            partition_key=PARTITION_KEY,
            stream_name=self._stream_name,
        )

    def forward(self, event: Any) -> PublishResult:
        record = self.build_record(event)
        response = self._client.put_record(**record.put_record_kwargs())
        result = PublishResult.model_validate(response)

        LOGGER.info(
            "contact_flow_event_forwarded",
            extra={
                "stream_name": record.stream_name,
                "shard_id": result.shard_id,
                "sequence_number": result.sequence_number,
            },
        )
        return result
