from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForwarderSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False)

    stream_name: str = Field(alias="STREAM_NAME")
    aws_region: str | None = Field(default=None, alias="AWS_REGION")

    @field_validator("stream_name")
    @classmethod
    def _validate_stream_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("STREAM_NAME must not be empty")
        return value


class ConsumerSettings(ForwarderSettings):
    aws_region: str = Field(alias="AWS_REGION")
    shard_iterator_type: Literal["LATEST", "TRIM_HORIZON"] = Field(
        default="LATEST",
        alias="SHARD_ITERATOR_TYPE",
    )
    get_records_interval_ms: int = Field(default=1000, alias="GET_RECORDS_INTERVAL_MS")
    get_records_limit: int = Field(default=100, alias="GET_RECORDS_LIMIT")

    kinesis_retry_base_delay_ms: int = Field(default=100, alias="KINESIS_RETRY_BASE_DELAY_MS")
    kinesis_retry_max_delay_ms: int = Field(default=5000, alias="KINESIS_RETRY_MAX_DELAY_MS")
    kinesis_retry_max_attempts: int = Field(default=3, alias="KINESIS_RETRY_MAX_ATTEMPTS")

    @field_validator("get_records_interval_ms")
    @classmethod
    def _validate_interval(cls, value: int) -> int:
        if value < 1:
            raise ValueError("GET_RECORDS_INTERVAL_MS must be > 0")
        return value

    @field_validator("get_records_limit")
    @classmethod
    def _validate_limit(cls, value: int) -> int:
        # GetRecords accepts at most 10,000 records per call.
        if value < 1 or value > 10_000:
            raise ValueError("GET_RECORDS_LIMIT must be between 1 and 10_000")
        return value

    @field_validator("kinesis_retry_max_attempts")
    @classmethod
    def _validate_retry_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("KINESIS_RETRY_MAX_ATTEMPTS must be >= 1")
        return value

    @model_validator(mode="after")
    def _validate_retry_delays(self) -> ConsumerSettings:
        if self.kinesis_retry_base_delay_ms < 0:
            raise ValueError("KINESIS_RETRY_BASE_DELAY_MS must be >= 0")
        if self.kinesis_retry_max_delay_ms < self.kinesis_retry_base_delay_ms:
            raise ValueError(
                "KINESIS_RETRY_MAX_DELAY_MS must be >= KINESIS_RETRY_BASE_DELAY_MS"
            )
        return self
