# -*- coding: utf-8 -*-

"""
Data model of one Firehose log sink.

:class:`StreamConfig` is what the user writes down, everything else (names,
prefixes, the format policy, the catalog table) is derived from it.
"""

import typing as T

import attr

from .format_policy import (
    FormatPolicy,
    StorageFormat,
    resolve_format_policy,
)

BUFFER_SIZE_RANGE = (1, 128)  # MB
BUFFER_INTERVAL_RANGE = (60, 900)  # seconds
PARQUET_MIN_BUFFER_SIZE = 64  # MB, required by the format conversion


class InvalidConfig(ValueError):
    pass


def ensure_endswith_slash(s3_prefix: str) -> str:
    """
    For kinesis delivery stream s3 destination, the s3 prefix has to ends
    with "/". This function can ensure that.
    """
    if s3_prefix.endswith("/"):
        return s3_prefix
    else:
        return s3_prefix + "/"


def _not_empty(instance, attribute, value):
    if not value:
        raise InvalidConfig(f"{attribute.name} cannot be empty")


def _in_range(low: int, high: int):
    def validator(instance, attribute, value):
        if not (low <= value <= high):
            raise InvalidConfig(
                f"{attribute.name} = {value} is not in range [{low}, {high}]"
            )

    return validator


@attr.s
class Column:
    name: str = attr.ib(validator=_not_empty)
    type: str = attr.ib(default="string")
    comment: T.Optional[str] = attr.ib(default=None)

    @classmethod
    def from_dict(cls, data: dict) -> "Column":
        return cls(**data)

    def to_dict(self) -> dict:
        dct = {"Name": self.name, "Type": self.type}
        if self.comment:
            dct["Comment"] = self.comment
        return dct


def _to_columns(value) -> T.List[Column]:
    return [
        v if isinstance(v, Column) else Column.from_dict(v)
        for v in value
    ]


@attr.s
class CatalogTableSpec:
    database_name: str = attr.ib()
    table_name: str = attr.ib()
    input_format: str = attr.ib()
    output_format: str = attr.ib()
    serialization_library: str = attr.ib()
    serde_parameters: T.Dict[str, str] = attr.ib()
    location: str = attr.ib()
    partition_keys: T.List[Column] = attr.ib(factory=list, converter=_to_columns)
    columns: T.List[Column] = attr.ib(factory=list, converter=_to_columns)

    def to_table_input(self) -> dict:
        """
        Return the Glue ``TableInput`` as a plain dict.
        """
        return {
            "Name": self.table_name,
            "TableType": "EXTERNAL_TABLE",
            "Parameters": {"EXTERNAL": "TRUE"},
            "PartitionKeys": [col.to_dict() for col in self.partition_keys],
            "StorageDescriptor": {
                "Location": self.location,
                "InputFormat": self.input_format,
                "OutputFormat": self.output_format,
                "SerdeInfo": {
                    "SerializationLibrary": self.serialization_library,
                    "Parameters": dict(self.serde_parameters),
                },
                "Columns": [col.to_dict() for col in self.columns],
            },
        }


@attr.s
class AlarmConfig:
    data_freshness_threshold_sec: int = attr.ib(default=900)
    period_sec: int = attr.ib(default=300)
    evaluation_periods: int = attr.ib(default=1)
    alarm_actions: T.List[str] = attr.ib(factory=list)
    treat_missing_data: str = attr.ib(default="notBreaching")

    @evaluation_periods.validator
    def check_evaluation_periods(self, attribute, value):
        if value < 1:
            raise InvalidConfig("evaluation_periods must be at least 1")

    @period_sec.validator
    def check_period_sec(self, attribute, value):
        # cloudwatch only accepts 10, 30 or a multiple of 60
        if not (value in (10, 30) or (value > 0 and value % 60 == 0)):
            raise InvalidConfig(
                f"period_sec = {value} must be 10, 30 or a multiple of 60"
            )


def _to_alarm(value) -> AlarmConfig:
    if isinstance(value, AlarmConfig):
        return value
    return AlarmConfig(**value)


@attr.s
class StreamConfig:
    prefix: str = attr.ib(validator=_not_empty)
    log_name: str = attr.ib(validator=_not_empty)
    bucket_arn: str = attr.ib(validator=_not_empty)
    role_arn: str = attr.ib(validator=_not_empty)
    storage_format: str = attr.ib(default=StorageFormat.json)
    buffer_size_mb: int = attr.ib(
        default=5,
        validator=_in_range(*BUFFER_SIZE_RANGE),
    )
    buffer_interval_sec: int = attr.ib(
        default=300,
        validator=_in_range(*BUFFER_INTERVAL_RANGE),
    )
    kms_key_arn: T.Optional[str] = attr.ib(default=None)
    database_name: T.Optional[str] = attr.ib(default=None)
    table_name: T.Optional[str] = attr.ib(default=None)
    columns: T.List[Column] = attr.ib(factory=list, converter=_to_columns)
    partition_keys: T.List[Column] = attr.ib(factory=list, converter=_to_columns)
    log_retention_days: int = attr.ib(default=14)
    alarm: AlarmConfig = attr.ib(factory=AlarmConfig, converter=_to_alarm)

    def __attrs_post_init__(self):
        # raises InvalidFormat
        policy = resolve_format_policy(self.storage_format)
        self.storage_format = policy.storage_format
        if policy.has_catalog_table:
            if self.buffer_size_mb < PARQUET_MIN_BUFFER_SIZE:
                raise InvalidConfig(
                    f"parquet delivery requires buffer_size_mb >= "
                    f"{PARQUET_MIN_BUFFER_SIZE}, got {self.buffer_size_mb}"
                )
            if not (self.database_name and self.table_name):
                raise InvalidConfig(
                    "parquet delivery requires database_name and table_name"
                )
            if not self.columns:
                raise InvalidConfig("parquet delivery requires at least one column")
        if not self.bucket_arn.startswith("arn:aws:s3:::"):
            raise InvalidConfig(f"{self.bucket_arn!r} is not a s3 bucket arn")

    @classmethod
    def from_dict(cls, data: dict) -> "StreamConfig":
        try:
            return cls(**data)
        except TypeError as e:
            raise InvalidConfig(str(e)) from e

    def to_dict(self) -> dict:
        return attr.asdict(self)

    @property
    def policy(self) -> FormatPolicy:
        return resolve_format_policy(self.storage_format)

    @property
    def stream_name(self) -> str:
        return f"{self.prefix}-{self.log_name}"

    @property
    def log_group_name(self) -> str:
        return f"/aws/kinesisfirehose/{self.stream_name}"

    @property
    def log_stream_name(self) -> str:
        return "S3Delivery"

    @property
    def bucket_name(self) -> str:
        return self.bucket_arn.split(":::", 1)[1]

    @property
    def s3_prefix(self) -> str:
        return ensure_endswith_slash(self.log_name)

    @property
    def error_output_prefix(self) -> str:
        return ensure_endswith_slash(
            f"{self.log_name}-errors/!{{firehose:error-output-type}}"
        )

    @property
    def s3_location(self) -> str:
        return f"s3://{self.bucket_name}/{self.s3_prefix}"

    def catalog_table_spec(self) -> T.Optional[CatalogTableSpec]:
        """
        The Glue table the parquet conversion reads its schema from.
        Json delivery has no catalog table, returns None.
        """
        policy = self.policy
        if not policy.has_catalog_table:
            return None
        return CatalogTableSpec(
            database_name=self.database_name,
            table_name=self.table_name,
            input_format=policy.input_format,
            output_format=policy.output_format,
            serialization_library=policy.serialization_library,
            serde_parameters=policy.serde_parameters,
            location=self.s3_location,
            partition_keys=list(self.partition_keys),
            columns=list(self.columns),
        )
