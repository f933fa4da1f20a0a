# -*- coding: utf-8 -*-

import pytest
from firehose_sink.iac.s1_dependency import make_dependency_template
from firehose_sink.iac.s2_app import Stack, make_app_template


def make_stack(stream_config) -> Stack:
    return Stack(
        project_name="firehose_sink",
        stage="test",
        aws_account_id="111122223333",
        aws_region="us-east-1",
        stream_config=stream_config,
    )


def test_dependency_template():
    tpl = make_dependency_template("111122223333", "us-east-1")
    resources = tpl.to_dict()["Resources"]
    assert resources["S3BucketForCottonFormation"]["Properties"]["BucketName"] == \
        "111122223333-us-east-1-cottonformation"


def test_json_stack(json_stream_config):
    stack = make_stack(json_stream_config)
    assert stack.stack_name == "firehose-sink-audit-log-test"
    assert stack.glue_table is None

    resources = make_app_template(stack).to_dict()["Resources"]
    assert set(resources) == {
        "LogGroup", "LogStream", "DeliveryStream", "DataFreshnessAlarm",
    }

    delivery_stream = resources["DeliveryStream"]["Properties"]
    assert delivery_stream["DeliveryStreamName"] == "acme-prod-audit-log"
    assert "ExtendedS3DestinationConfiguration" not in delivery_stream
    destination = delivery_stream["S3DestinationConfiguration"]
    assert destination["CompressionFormat"] == "GZIP"
    assert destination["Prefix"] == "audit-log/"
    assert destination["EncryptionConfiguration"] == {"NoEncryptionConfig": "NoEncryption"}
    assert destination["CloudWatchLoggingOptions"]["LogGroupName"] == \
        "/aws/kinesisfirehose/acme-prod-audit-log"

    log_group = resources["LogGroup"]["Properties"]
    assert log_group["LogGroupName"] == "/aws/kinesisfirehose/acme-prod-audit-log"
    assert "KmsKeyId" not in log_group


def test_parquet_stack(parquet_stream_config):
    stack = make_stack(parquet_stream_config)
    resources = make_app_template(stack).to_dict()["Resources"]
    assert set(resources) == {
        "LogGroup", "LogStream", "GlueTable", "DeliveryStream", "DataFreshnessAlarm",
    }

    glue_table = resources["GlueTable"]["Properties"]
    assert glue_table["DatabaseName"] == "acme_prod"
    assert glue_table["CatalogId"] == "111122223333"
    table_input = glue_table["TableInput"]
    assert table_input["Name"] == "access_log"
    serde_info = table_input["StorageDescriptor"]["SerdeInfo"]
    assert serde_info["SerializationLibrary"] == \
        "org.apache.hadoop.hive.ql.io.parquet.serde.ParquetHiveSerDe"
    assert serde_info["Parameters"] == {"serialization.format": "1"}

    delivery_stream = resources["DeliveryStream"]["Properties"]
    assert "S3DestinationConfiguration" not in delivery_stream
    destination = delivery_stream["ExtendedS3DestinationConfiguration"]
    assert destination["CompressionFormat"] == "UNCOMPRESSED"
    assert destination["BufferingHints"] == {"IntervalInSeconds": 300, "SizeInMBs": 64}
    assert destination["EncryptionConfiguration"]["KMSEncryptionConfig"]["AWSKMSKeyARN"] == \
        "arn:aws:kms:us-east-1:111122223333:key/abcd"
    conversion = destination["DataFormatConversionConfiguration"]
    assert conversion["Enabled"] is True
    assert conversion["SchemaConfiguration"]["TableName"] == "access_log"
    assert conversion["SchemaConfiguration"]["DatabaseName"] == "acme_prod"
    assert "GlueTable" in resources["DeliveryStream"]["DependsOn"]

    log_group = resources["LogGroup"]["Properties"]
    assert log_group["KmsKeyId"] == "arn:aws:kms:us-east-1:111122223333:key/abcd"
    assert log_group["RetentionInDays"] == 14


def test_glue_table_keeps_column_comment(parquet_stream_config):
    parquet_stream_config.columns[0].comment = "request id from the load balancer"
    parquet_stream_config.partition_keys[0].comment = "yyyy-mm-dd"
    stack = make_stack(parquet_stream_config)
    table_input = make_app_template(stack).to_dict()["Resources"]["GlueTable"]["Properties"]["TableInput"]

    expected = parquet_stream_config.catalog_table_spec().to_table_input()
    assert table_input["StorageDescriptor"]["Columns"] == expected["StorageDescriptor"]["Columns"]
    assert table_input["StorageDescriptor"]["Columns"][0] == {
        "Name": "request_id",
        "Type": "string",
        "Comment": "request id from the load balancer",
    }
    assert table_input["PartitionKeys"] == [
        {"Name": "dt", "Type": "string", "Comment": "yyyy-mm-dd"},
    ]


def test_alarm(json_stream_config):
    json_stream_config.alarm.data_freshness_threshold_sec = 600
    json_stream_config.alarm.alarm_actions = ["arn:aws:sns:us-east-1:111122223333:oncall"]
    stack = make_stack(json_stream_config)
    alarm = make_app_template(stack).to_dict()["Resources"]["DataFreshnessAlarm"]["Properties"]
    assert alarm["AlarmName"] == "acme-prod-audit-log-data-freshness"
    assert alarm["Namespace"] == "AWS/Firehose"
    assert alarm["MetricName"] == "DeliveryToS3.DataFreshness"
    assert alarm["ComparisonOperator"] == "GreaterThanThreshold"
    assert alarm["Threshold"] == 600
    assert alarm["Dimensions"] == [
        {"Name": "DeliveryStreamName", "Value": "acme-prod-audit-log"},
    ]
    assert alarm["AlarmActions"] == ["arn:aws:sns:us-east-1:111122223333:oncall"]


if __name__ == "__main__":
    import os

    basename = os.path.basename(__file__)
    pytest.main([basename, "-s", "--tb=native"])
