# -*- coding: utf-8 -*-

"""
This is the Firehose log sink application stack.

Prerequisite:

1. The destination S3 bucket, it is shared by many log feeds so it is not
    managed by this stack.
2. The IAM Role the delivery stream assumes, it needs s3 / glue / kms /
    logs permission.
3. (Optional) The KMS key used to encrypt the delivered objects.
4. (Parquet only) The Glue catalog database.

Resources:

1. a CloudWatch log group / log stream for delivery errors.
2. (Parquet only) a Glue catalog table, the parquet conversion reads the
    schema from it, and Athena reads the data through it.
3. a Kinesis delivery stream, S3 destination for json, extended S3
    destination with format conversion for parquet.
4. a CloudWatch alarm on the delivery data freshness.
"""

import logging

import attr
import cottonformation as cft
from cottonformation.res import logs, glue, kinesisfirehose, cloudwatch

from ..model import StreamConfig

logger = logging.getLogger(__name__)


@attr.s
class Stack(cft.Stack):
    project_name: str = attr.ib()
    stage: str = attr.ib()
    aws_account_id: str = attr.ib()
    aws_region: str = attr.ib()
    stream_config: StreamConfig = attr.ib()

    @property
    def project_name_slug(self) -> str:
        return self.project_name.replace("_", "-")

    @property
    def stack_name(self) -> str:
        return f"{self.project_name_slug}-{self.stream_config.log_name}-{self.stage}"

    @property
    def alarm_name(self) -> str:
        return f"{self.stream_config.stream_name}-data-freshness"

    def mk_rg1_logging(self):
        self.rg1_logging = cft.ResourceGroup("RG1")
        sc = self.stream_config

        kwargs = dict(
            p_LogGroupName=sc.log_group_name,
            p_RetentionInDays=sc.log_retention_days,
            ra_DeletionPolicy=cft.constant.DeletionPolicy.Delete,
        )
        if sc.kms_key_arn:
            kwargs["p_KmsKeyId"] = sc.kms_key_arn
        self.log_group = logs.LogGroup("LogGroup", **kwargs)
        self.rg1_logging.add(self.log_group)

        self.log_stream = logs.LogStream(
            "LogStream",
            rp_LogGroupName=sc.log_group_name,
            p_LogStreamName=sc.log_stream_name,
            ra_DependsOn=[
                self.log_group,
            ]
        )
        self.rg1_logging.add(self.log_stream)

    def mk_rg2_catalog(self):
        self.rg2_catalog = cft.ResourceGroup("RG2")
        self.glue_table = None

        table_spec = self.stream_config.catalog_table_spec()
        if table_spec is None:
            return

        # the table input is rendered by CatalogTableSpec, here it is only
        # mapped onto the glue property classes
        table_input = table_spec.to_table_input()
        sd = table_input["StorageDescriptor"]

        def to_glue_column(dct: dict) -> glue.PropTableColumn:
            return glue.PropTableColumn(
                rp_Name=dct["Name"],
                p_Type=dct["Type"],
                p_Comment=dct.get("Comment"),
            )

        self.glue_table = glue.Table(
            "GlueTable",
            rp_CatalogId=self.aws_account_id,
            rp_DatabaseName=table_spec.database_name,
            rp_TableInput=glue.PropTableTableInput(
                p_Name=table_input["Name"],
                p_TableType=table_input["TableType"],
                p_Parameters=table_input["Parameters"],
                p_PartitionKeys=[
                    to_glue_column(dct)
                    for dct in table_input["PartitionKeys"]
                ],
                p_StorageDescriptor=glue.PropTableStorageDescriptor(
                    p_Location=sd["Location"],
                    p_InputFormat=sd["InputFormat"],
                    p_OutputFormat=sd["OutputFormat"],
                    p_SerdeInfo=glue.PropTableSerdeInfo(
                        p_SerializationLibrary=sd["SerdeInfo"]["SerializationLibrary"],
                        p_Parameters=sd["SerdeInfo"]["Parameters"],
                    ),
                    p_Columns=[
                        to_glue_column(dct)
                        for dct in sd["Columns"]
                    ],
                ),
            ),
        )
        self.rg2_catalog.add(self.glue_table)

    def _buffering_hints(self) -> kinesisfirehose.PropDeliveryStreamBufferingHints:
        return kinesisfirehose.PropDeliveryStreamBufferingHints(
            p_IntervalInSeconds=self.stream_config.buffer_interval_sec,
            p_SizeInMBs=self.stream_config.buffer_size_mb,
        )

    def _cloudwatch_logging_options(self) -> kinesisfirehose.PropDeliveryStreamCloudWatchLoggingOptions:
        return kinesisfirehose.PropDeliveryStreamCloudWatchLoggingOptions(
            p_Enabled=True,
            p_LogGroupName=self.stream_config.log_group_name,
            p_LogStreamName=self.stream_config.log_stream_name,
        )

    def _encryption_configuration(self) -> kinesisfirehose.PropDeliveryStreamEncryptionConfiguration:
        if self.stream_config.kms_key_arn:
            return kinesisfirehose.PropDeliveryStreamEncryptionConfiguration(
                p_KMSEncryptionConfig=kinesisfirehose.PropDeliveryStreamKMSEncryptionConfig(
                    rp_AWSKMSKeyARN=self.stream_config.kms_key_arn,
                ),
            )
        else:
            return kinesisfirehose.PropDeliveryStreamEncryptionConfiguration(
                p_NoEncryptionConfig="NoEncryption",
            )

    def _data_format_conversion_configuration(self) -> kinesisfirehose.PropDeliveryStreamDataFormatConversionConfiguration:
        sc = self.stream_config
        return kinesisfirehose.PropDeliveryStreamDataFormatConversionConfiguration(
            p_Enabled=True,
            p_InputFormatConfiguration=kinesisfirehose.PropDeliveryStreamInputFormatConfiguration(
                p_Deserializer=kinesisfirehose.PropDeliveryStreamDeserializer(
                    p_OpenXJsonSerDe=kinesisfirehose.PropDeliveryStreamOpenXJsonSerDe(),
                ),
            ),
            p_OutputFormatConfiguration=kinesisfirehose.PropDeliveryStreamOutputFormatConfiguration(
                p_Serializer=kinesisfirehose.PropDeliveryStreamSerializer(
                    p_ParquetSerDe=kinesisfirehose.PropDeliveryStreamParquetSerDe(
                        p_Compression="SNAPPY",
                    ),
                ),
            ),
            p_SchemaConfiguration=kinesisfirehose.PropDeliveryStreamSchemaConfiguration(
                p_CatalogId=self.aws_account_id,
                p_DatabaseName=sc.database_name,
                p_TableName=sc.table_name,
                p_Region=self.aws_region,
                p_RoleARN=sc.role_arn,
                p_VersionId="LATEST",
            ),
        )

    def mk_rg3_delivery_stream(self):
        self.rg3_delivery_stream = cft.ResourceGroup("RG3")
        sc = self.stream_config
        policy = sc.policy

        depends_on = [self.log_group, ]
        if policy.is_extended_s3:
            depends_on.append(self.glue_table)
            destination_kwargs = dict(
                p_ExtendedS3DestinationConfiguration=kinesisfirehose.PropDeliveryStreamExtendedS3DestinationConfiguration(
                    rp_BucketARN=sc.bucket_arn,
                    rp_RoleARN=sc.role_arn,
                    p_Prefix=sc.s3_prefix,
                    p_ErrorOutputPrefix=sc.error_output_prefix,
                    p_CompressionFormat=policy.compression,
                    p_BufferingHints=self._buffering_hints(),
                    p_CloudWatchLoggingOptions=self._cloudwatch_logging_options(),
                    p_EncryptionConfiguration=self._encryption_configuration(),
                    p_DataFormatConversionConfiguration=self._data_format_conversion_configuration(),
                ),
            )
        else:
            destination_kwargs = dict(
                p_S3DestinationConfiguration=kinesisfirehose.PropDeliveryStreamS3DestinationConfiguration(
                    rp_BucketARN=sc.bucket_arn,
                    rp_RoleARN=sc.role_arn,
                    p_Prefix=sc.s3_prefix,
                    p_ErrorOutputPrefix=sc.error_output_prefix,
                    p_CompressionFormat=policy.compression,
                    p_BufferingHints=self._buffering_hints(),
                    p_CloudWatchLoggingOptions=self._cloudwatch_logging_options(),
                    p_EncryptionConfiguration=self._encryption_configuration(),
                ),
            )
        logger.debug(
            "delivery stream %s uses %s destination",
            sc.stream_name, policy.destination,
        )

        self.delivery_stream = kinesisfirehose.DeliveryStream(
            "DeliveryStream",
            p_DeliveryStreamName=sc.stream_name,
            p_DeliveryStreamType="DirectPut",
            ra_DependsOn=depends_on,
            **destination_kwargs
        )
        self.rg3_delivery_stream.add(self.delivery_stream)

    def mk_rg4_alarm(self):
        self.rg4_alarm = cft.ResourceGroup("RG4")
        sc = self.stream_config
        alarm = sc.alarm

        self.data_freshness_alarm = cloudwatch.Alarm(
            "DataFreshnessAlarm",
            rp_ComparisonOperator="GreaterThanThreshold",
            rp_EvaluationPeriods=alarm.evaluation_periods,
            p_AlarmName=self.alarm_name,
            p_AlarmDescription=(
                f"the oldest record in {sc.stream_name} is older than "
                f"{alarm.data_freshness_threshold_sec} seconds"
            ),
            p_Namespace="AWS/Firehose",
            p_MetricName="DeliveryToS3.DataFreshness",
            p_Statistic="Maximum",
            p_Period=alarm.period_sec,
            p_Threshold=float(alarm.data_freshness_threshold_sec),
            p_Dimensions=[
                cloudwatch.PropAlarmDimension(
                    rp_Name="DeliveryStreamName",
                    rp_Value=sc.stream_name,
                ),
            ],
            p_AlarmActions=list(alarm.alarm_actions),
            p_TreatMissingData=alarm.treat_missing_data,
            ra_DependsOn=[
                self.delivery_stream,
            ],
        )
        self.rg4_alarm.add(self.data_freshness_alarm)

    def post_hook(self):
        self.mk_rg1_logging()
        self.mk_rg2_catalog()
        self.mk_rg3_delivery_stream()
        self.mk_rg4_alarm()


def make_app_template(stack: Stack) -> cft.Template:
    tpl = cft.Template()

    tpl.add(stack.rg1_logging)
    if stack.glue_table is not None:
        tpl.add(stack.rg2_catalog)
    tpl.add(stack.rg3_delivery_stream)
    tpl.add(stack.rg4_alarm)

    tpl.batch_tagging(ProjectName=stack.project_name_slug)
    return tpl
