# -*- coding: utf-8 -*-

import cottonformation as cft
from firehose_sink.iac.s1_dependency import make_dependency_template
from firehose_sink.boto_ses import boto_ses, get_aws_account_id, get_aws_region

aws_account_id = get_aws_account_id()
aws_region = get_aws_region()

tpl = make_dependency_template(aws_account_id, aws_region)

env = cft.Env(boto_ses=boto_ses)

env.deploy(
    template=tpl,
    stack_name=f"cottonformation-deps-{aws_account_id}-{aws_region}",
)
