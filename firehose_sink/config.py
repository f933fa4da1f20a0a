# -*- coding: utf-8 -*-

import json
import logging
from pathlib import Path

from .model import StreamConfig, InvalidConfig

logger = logging.getLogger(__name__)

dir_project_root = Path(__file__).absolute().parent.parent
path_stream_config = dir_project_root / "config" / "stream.json"


class Config:
    project_name = "firehose_sink"
    stage = "dev"

    @property
    def project_name_slug(self):
        return self.project_name.replace("_", "-")

    def artifacts_bucket_name(self, aws_account_id: str, aws_region: str) -> str:
        return f"{aws_account_id}-{aws_region}-cottonformation"


config = Config()


def load_stream_config(path=path_stream_config) -> StreamConfig:
    """
    Load the :class:`~firehose_sink.model.StreamConfig` from a json file.

    :raises FileNotFoundError: the file doesn't exist.
    :raises InvalidConfig: the file is not valid json or the content doesn't
        describe a valid stream.
    """
    path = Path(path)
    logger.debug("load stream config from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidConfig(f"{path} is not a utf-8 encoded file: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidConfig(f"{path} is not a valid json file: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfig(f"{path} has to contain a json object")
    return StreamConfig.from_dict(data)


if __name__ == "__main__":
    print(config.project_name_slug)
