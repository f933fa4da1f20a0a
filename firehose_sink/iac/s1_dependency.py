# -*- coding: utf-8 -*-

"""
Basic dependencies to make infrastructure as code works.

Including:

- a S3 bucket to store cloudformation template artifacts
"""

import cottonformation as cft
from cottonformation.res import s3

from ..config import config


def make_dependency_template(aws_account_id: str, aws_region: str) -> cft.Template:
    tpl = cft.Template()

    s3_bucket_for_artifacts = s3.Bucket(
        "S3BucketForCottonFormation",
        p_BucketName=config.artifacts_bucket_name(aws_account_id, aws_region),
    )
    tpl.add(s3_bucket_for_artifacts)
    tpl.batch_tagging(ProjectName=config.project_name_slug)
    return tpl
