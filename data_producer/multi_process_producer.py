# -*- coding: utf-8 -*-

"""
This script use multiple threads to simulate many log producers for load test.
"""

import time
import uuid
import random
from datetime import datetime, timezone
from mpire import WorkerPool
from faker import Faker
from firehose_sink.boto_ses import boto_ses
from firehose_sink.config import load_stream_config
from firehose_sink.fh_helper import put_record_batch

fh_client = boto_ses.client("firehose")
stream_name = load_stream_config().stream_name
n_records_per_api = 100  # must <= 500

api_invoke_count = list()
st = datetime.now()


def run_producer(api_invoke_count: list, producer_id: int):
    fake = Faker()
    n_sent = 0
    for _ in range(10):
        time.sleep(1)
        records = [
            {
                "request_id": str(uuid.uuid4()),
                "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f"),
                "method": fake.http_method(),
                "path": fake.uri_path(),
                "status": random.choice([200, 200, 200, 201, 301, 404, 500]),
                "latency_ms": round(random.uniform(1, 500), 2),
            }
            for _ in range(n_records_per_api)
        ]
        put_record_batch(
            firehose_client=fh_client,
            stream_name=stream_name,
            records=records,
        )

        api_invoke_count.append(1)
        n_sent += n_records_per_api
        et = datetime.now()
        elapse = (et - st).total_seconds()
        total_n_sent = len(api_invoke_count) * n_records_per_api
        tps = int(total_n_sent / elapse)
        print(f"this is producer: {producer_id}, has sent {n_sent} records. all producer has sent {total_n_sent} records. tps = {tps} records / sec")


if __name__ == "__main__":
    n_jobs = 8
    args = [
        dict(producer_id=i)
        for i in range(1, 1 + n_jobs)
    ]

    st = datetime.now()

    with WorkerPool(
        n_jobs=n_jobs,
        shared_objects=api_invoke_count,
        start_method="threading",
    ) as pool:
        results = pool.map(run_producer, args)

    et = datetime.now()
    elapse = (et - st).total_seconds()
    print("elapse %.2f sec" % elapse)
    print(f"has sent {len(api_invoke_count) * n_records_per_api}")
