# -*- coding: utf-8 -*-

"""
Map the storage format flag to the delivery stream and catalog settings.

There are only two ways a log feed lands in S3:

- ``json``: the plain S3 destination writes newline delimited json, GZIP
  compressed. Nothing is registered in the Glue catalog.
- ``parquet``: the extended S3 destination converts the records to parquet
  before writing them. Firehose needs a Glue table to read the schema from,
  and the object level compression has to be UNCOMPRESSED because parquet
  compresses its own pages.
"""

import typing as T
import logging

import attr

logger = logging.getLogger(__name__)


class StorageFormat:
    json = "json"
    parquet = "parquet"

    @classmethod
    def all(cls) -> T.List[str]:
        return [cls.json, cls.parquet]


class Destination:
    s3 = "s3"
    extended_s3 = "extended_s3"


class Compression:
    gzip = "GZIP"
    uncompressed = "UNCOMPRESSED"


class InvalidFormat(ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(
            f"invalid storage format {value!r}, "
            f"must be one of {StorageFormat.all()}"
        )


@attr.s(frozen=True)
class FormatPolicy:
    storage_format: str = attr.ib()
    destination: str = attr.ib()
    compression: str = attr.ib()
    serde_param_key: str = attr.ib()
    serde_param_value: str = attr.ib()
    serialization_library: str = attr.ib()
    input_format: str = attr.ib()
    output_format: str = attr.ib()

    @property
    def is_extended_s3(self) -> bool:
        return self.destination == Destination.extended_s3

    @property
    def has_catalog_table(self) -> bool:
        """
        Only the parquet conversion reads its schema from the Glue catalog.
        """
        return self.storage_format == StorageFormat.parquet

    @property
    def serde_parameters(self) -> T.Dict[str, str]:
        return {self.serde_param_key: self.serde_param_value}


JSON_POLICY = FormatPolicy(
    storage_format=StorageFormat.json,
    destination=Destination.s3,
    compression=Compression.gzip,
    serde_param_key="ignore.malformed.json",
    serde_param_value="true",
    serialization_library="org.openx.data.jsonserde.JsonSerDe",
    input_format="org.apache.hadoop.mapred.TextInputFormat",
    output_format="org.apache.hadoop.hive.ql.io.HiveIgnoreKeyTextOutputFormat",
)

PARQUET_POLICY = FormatPolicy(
    storage_format=StorageFormat.parquet,
    destination=Destination.extended_s3,
    compression=Compression.uncompressed,
    serde_param_key="serialization.format",
    serde_param_value="1",
    serialization_library="org.apache.hadoop.hive.ql.io.parquet.serde.ParquetHiveSerDe",
    input_format="org.apache.hadoop.hive.ql.io.parquet.MapredParquetInputFormat",
    output_format="org.apache.hadoop.hive.ql.io.parquet.MapredParquetOutputFormat",
)

_policy_mapper = {
    StorageFormat.json: JSON_POLICY,
    StorageFormat.parquet: PARQUET_POLICY,
}


def resolve_format_policy(storage_format: str) -> FormatPolicy:
    """
    Resolve the :class:`FormatPolicy` for a storage format flag.

    :param storage_format: ``"json"`` or ``"parquet"``, surrounding
        whitespace and letter case are ignored.

    :raises InvalidFormat: for anything else, including non string values.
    """
    if not isinstance(storage_format, str):
        raise InvalidFormat(storage_format)
    key = storage_format.strip().lower()
    try:
        policy = _policy_mapper[key]
    except KeyError:
        raise InvalidFormat(storage_format) from None
    logger.debug(
        "storage format %r resolved to %s destination with %s compression",
        storage_format, policy.destination, policy.compression,
    )
    return policy
