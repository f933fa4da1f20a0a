# -*- coding: utf-8 -*-

import boto3

boto_ses = boto3.session.Session()

_cache = dict()


def get_aws_account_id() -> str:
    if "aws_account_id" not in _cache:
        sts_client = boto_ses.client("sts")
        _cache["aws_account_id"] = sts_client.get_caller_identity()["Account"]
    return _cache["aws_account_id"]


def get_aws_region() -> str:
    return boto_ses.region_name
