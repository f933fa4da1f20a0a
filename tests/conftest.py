# -*- coding: utf-8 -*-

import pytest

from firehose_sink.model import StreamConfig


@pytest.fixture()
def json_stream_config() -> StreamConfig:
    return StreamConfig(
        prefix="acme-prod",
        log_name="audit-log",
        storage_format="json",
        bucket_arn="arn:aws:s3:::acme-prod-logs",
        role_arn="arn:aws:iam::111122223333:role/acme-prod-firehose",
        buffer_size_mb=5,
        buffer_interval_sec=300,
    )


@pytest.fixture()
def parquet_stream_config() -> StreamConfig:
    return StreamConfig(
        prefix="acme-prod",
        log_name="access-log",
        storage_format="parquet",
        bucket_arn="arn:aws:s3:::acme-prod-logs",
        role_arn="arn:aws:iam::111122223333:role/acme-prod-firehose",
        kms_key_arn="arn:aws:kms:us-east-1:111122223333:key/abcd",
        buffer_size_mb=64,
        buffer_interval_sec=300,
        database_name="acme_prod",
        table_name="access_log",
        columns=[
            {"name": "request_id", "type": "string"},
            {"name": "status", "type": "int"},
        ],
        partition_keys=[
            {"name": "dt", "type": "string"},
        ],
    )
