# -*- coding: utf-8 -*-

import gzip

from s3pathlib import S3Path
from firehose_sink.config import load_stream_config

stream_config = load_stream_config()

s3path_delivered = S3Path(stream_config.bucket_name, stream_config.s3_prefix)
s3path_failed = S3Path(stream_config.bucket_name, stream_config.error_output_prefix.split("!")[0])


def count_records_in_s3_folder(s3path):
    """
    Only works for json delivery, parquet files are binary.
    """
    return sum([
        gzip.decompress(sp.read_bytes()).decode("utf-8").count("\n")
        for sp in s3path.iter_objects()
    ])


# --- Count file number
# print(f"{s3path_delivered.key} has {s3path_delivered.count_objects()} files")
# print(f"{s3path_failed.key} has {s3path_failed.count_objects()} files")

# --- Count record number
# print(f"{s3path_delivered.key} has {count_records_in_s3_folder(s3path_delivered)} records")
# print(f"{s3path_failed.key} has {count_records_in_s3_folder(s3path_failed)} records")

# --- Preview file content
# print(gzip.decompress(s3path_delivered.iter_objects().one().read_bytes()).decode("utf-8"))
