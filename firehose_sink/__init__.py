# -*- coding: utf-8 -*-

"""
Kinesis Firehose log sink to S3, with JSON or Parquet delivery.
"""

__version__ = "0.1.1"
