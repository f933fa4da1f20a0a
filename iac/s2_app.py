# -*- coding: utf-8 -*-

import logging

import cottonformation as cft
from firehose_sink.config import config, load_stream_config
from firehose_sink.iac.s2_app import Stack, make_app_template
from firehose_sink.boto_ses import boto_ses, get_aws_account_id, get_aws_region

logging.basicConfig(level=logging.DEBUG)

aws_account_id = get_aws_account_id()
aws_region = get_aws_region()

stack = Stack(
    project_name=config.project_name,
    stage=config.stage,
    aws_account_id=aws_account_id,
    aws_region=aws_region,
    stream_config=load_stream_config(),
)

# create cloudformation template
tpl = make_app_template(stack)

# deploy stack
env = cft.Env(boto_ses=boto_ses)
env.deploy(
    template=tpl,
    stack_name=stack.stack_name,
    bucket_name=config.artifacts_bucket_name(aws_account_id, aws_region),
)
