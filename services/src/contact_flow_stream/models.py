from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamRecord(BaseModel):
    """Single serialized event destined for Kinesis."""

    model_config = ConfigDict(frozen=True)

    data: str
    partition_key: str
    stream_name: str

    def put_record_kwargs(self) -> dict[str, Any]:
        return {
            "Data": self.data.encode("utf-8"),
            "PartitionKey": self.partition_key,
            "StreamName": self.stream_name,
        }


class PublishResult(BaseModel):
    """Acknowledgment returned by Kinesis PutRecord."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    shard_id: str = Field(alias="ShardId")
    sequence_number: str = Field(alias="SequenceNumber")
    encryption_type: str | None = Field(default=None, alias="EncryptionType")

    def to_response(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AudioStreamInfo(BaseModel):
    """Customer audio stream announced by a contact flow event."""

    model_config = ConfigDict(frozen=True)

    stream_name: str = Field(min_length=1)
    start_timestamp: datetime
