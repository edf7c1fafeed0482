from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Any

from contact_flow_stream.consumer import StreamConsumer
from contact_flow_stream.contact_flow import extract_audio_stream
from contact_flow_stream.kinesis import create_kinesis_client
from contact_flow_stream.settings import ConsumerSettings

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger().setLevel(level)


def log_contact_event(event: Any) -> None:
    audio_stream = extract_audio_stream(event)
    if audio_stream is None:
        return

    LOGGER.info(
        "contact_audio_stream_detected",
        extra={
            "video_stream_name": audio_stream.stream_name,
            "start_timestamp": audio_stream.start_timestamp.isoformat(),
        },
    )


async def run() -> None:
    configure_logging()
    settings = ConsumerSettings()

    LOGGER.info(
        "service_start",
        extra={
            "stream_name": settings.stream_name,
            "shard_iterator_type": settings.shard_iterator_type,
        },
    )

    consumer = StreamConsumer(
        client=create_kinesis_client(region_name=settings.aws_region),
        stream_name=settings.stream_name,
        handler=log_contact_event,
        shard_iterator_type=settings.shard_iterator_type,
        get_records_limit=settings.get_records_limit,
        get_records_interval_ms=settings.get_records_interval_ms,
        retry_base_delay_ms=settings.kinesis_retry_base_delay_ms,
        retry_max_delay_ms=settings.kinesis_retry_max_delay_ms,
        retry_max_attempts=settings.kinesis_retry_max_attempts,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await consumer.run(stop_event=stop_event)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
