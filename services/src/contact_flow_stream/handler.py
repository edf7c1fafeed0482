from __future__ import annotations

from functools import lru_cache
from typing import Any

from contact_flow_stream.app import configure_logging
from contact_flow_stream.forwarder import EventForwarder
from contact_flow_stream.kinesis import KinesisClient, create_kinesis_client
from contact_flow_stream.settings import ForwarderSettings

configure_logging()


@lru_cache(maxsize=None)
def _kinesis_client(region_name: str | None) -> KinesisClient:
    # Reused across warm invocations of the same container.
    return create_kinesis_client(region_name=region_name)


def lambda_handler(event: Any, context: Any) -> dict[str, str]:
    settings = ForwarderSettings()
    forwarder = EventForwarder(
        client=_kinesis_client(settings.aws_region),
        stream_name=settings.stream_name,
    )
    return forwarder.forward(event).to_response()
