# -*- coding: utf-8 -*-

"""
Send records to the delivery stream.
"""

import json
import logging
from typing import List, Dict, Iterable, Any

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 500  # put_record_batch api limit


def encode_record(record: Dict[str, Any]) -> Dict[str, bytes]:
    """
    Firehose concatenates the records in the s3 object, the trailing newline
    makes the output a valid newline delimited json file.
    """
    return {
        "Data": (json.dumps(record, ensure_ascii=False) + "\n").encode("utf-8"),
    }


def put_record_batch(
    firehose_client,
    stream_name: str,
    records: Iterable[Dict[str, Any]],
    batch_size: int = MAX_BATCH_SIZE,
) -> List[dict]:
    """
    Send records in chunks of ``batch_size``, one api call per chunk.

    :return: the api responses, one per chunk. Check ``FailedPutCount`` in
        each response to find out if any record has to be resent.
    """
    if not (1 <= batch_size <= MAX_BATCH_SIZE):
        raise ValueError(
            f"batch_size = {batch_size} is not in range [1, {MAX_BATCH_SIZE}]"
        )

    responses = list()
    chunk = list()

    def send(chunk: list):
        response = firehose_client.put_record_batch(
            DeliveryStreamName=stream_name,
            Records=chunk,
        )
        failed_put_count = response.get("FailedPutCount", 0)
        if failed_put_count:
            logger.warning(
                "%s of %s records failed to put to %s",
                failed_put_count, len(chunk), stream_name,
            )
        responses.append(response)

    for record in records:
        chunk.append(encode_record(record))
        if len(chunk) == batch_size:
            send(chunk)
            chunk = list()
    if chunk:
        send(chunk)

    return responses
