from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from contact_flow_stream.kinesis import KinesisClient, call_with_retries

LOGGER = logging.getLogger(__name__)

RecordHandler = Callable[[Any], None]


def decode_record(record: dict[str, Any]) -> Any:
    data = record["Data"]
    if isinstance(data, str):
        return json.loads(data)
    return json.loads(bytes(data).decode("utf-8"))


class StreamConsumer:
    """Polls the first shard of a Kinesis stream and hands decoded events to a handler.

    Undecodable records are logged and skipped; exceptions raised by the handler
    propagate and stop the consumer.
    """

    def __init__(
        self,
        *,
        client: KinesisClient,
        stream_name: str,
        handler: RecordHandler,
        shard_iterator_type: str = "LATEST",
        get_records_limit: int = 100,
        get_records_interval_ms: int = 1000,
        retry_base_delay_ms: int = 100,
        retry_max_delay_ms: int = 5000,
        retry_max_attempts: int = 3,
    ) -> None:
        if retry_max_attempts <= 0:
            raise ValueError("retry_max_attempts must be > 0")

        self._client = client
        self._stream_name = stream_name
        self._handler = handler
        self._shard_iterator_type = shard_iterator_type
        self._get_records_limit = get_records_limit
        self._interval_s = get_records_interval_ms / 1000.0
        self._retry_base_delay_ms = retry_base_delay_ms
        self._retry_max_delay_ms = retry_max_delay_ms
        self._retry_max_attempts = retry_max_attempts

    async def list_shard_ids(self) -> list[str]:
        response = await self._call(
            "list_shards",
            lambda: self._client.list_shards(StreamName=self._stream_name),
        )
        shard_ids = [shard["ShardId"] for shard in response.get("Shards", [])]
        if not shard_ids:
            raise RuntimeError(f"Kinesis stream {self._stream_name!r} has no shards")
        return shard_ids

    async def shard_iterator(self, shard_id: str) -> str:
        response = await self._call(
            "get_shard_iterator",
            lambda: self._client.get_shard_iterator(
                StreamName=self._stream_name,
                ShardId=shard_id,
                ShardIteratorType=self._shard_iterator_type,
            ),
        )
        return response["ShardIterator"]

    async def poll(self, shard_iterator: str) -> str | None:
        response = await self._call(
            "get_records",
            lambda: self._client.get_records(
                ShardIterator=shard_iterator,
                Limit=self._get_records_limit,
            ),
        )

        for record in response.get("Records", []):
            try:
                event = decode_record(record)
            except (KeyError, TypeError, UnicodeDecodeError, json.JSONDecodeError):
                LOGGER.exception(
                    "stream_record_decode_failed",
                    extra={"sequence_number": record.get("SequenceNumber")},
                )
                continue

            self._handler(event)

        return response.get("NextShardIterator")

    async def run(self, *, stop_event: asyncio.Event) -> None:
        shard_ids = await self.list_shard_ids()
        shard_id = shard_ids[0]
        if len(shard_ids) > 1:
            LOGGER.warning(
                "stream_has_multiple_shards",
                extra={"shard_count": len(shard_ids), "shard_id": shard_id},
            )

        iterator: str | None = await self.shard_iterator(shard_id)
        LOGGER.info(
            "stream_consumer_started",
            extra={"stream_name": self._stream_name, "shard_id": shard_id},
        )

        while iterator and not stop_event.is_set():
            iterator = await self.poll(iterator)
            if not iterator:
                break

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval_s)
            except asyncio.TimeoutError:
                pass

        LOGGER.info(
            "stream_consumer_stopped",
            extra={"shard_closed": iterator is None, "shard_id": shard_id},
        )

    async def _call(self, operation: str, fn: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        return await call_with_retries(
            fn,
            operation=operation,
            max_attempts=self._retry_max_attempts,
            base_delay_ms=self._retry_base_delay_ms,
            max_delay_ms=self._retry_max_delay_ms,
        )
