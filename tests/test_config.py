# -*- coding: utf-8 -*-

import json

import pytest
from firehose_sink.config import config, load_stream_config, path_stream_config
from firehose_sink.model import InvalidConfig


def test_config():
    assert config.project_name_slug == "firehose-sink"
    assert config.artifacts_bucket_name("111122223333", "us-east-1") == \
        "111122223333-us-east-1-cottonformation"


def test_load_sample_stream_config():
    stream_config = load_stream_config(path_stream_config)
    assert stream_config.storage_format == "parquet"
    assert stream_config.catalog_table_spec() is not None


def test_load_stream_config_errors(tmp_path, json_stream_config):
    with pytest.raises(FileNotFoundError):
        load_stream_config(tmp_path / "not-exists.json")

    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidConfig):
        load_stream_config(path)

    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"prefix": "\xff"}')
    with pytest.raises(InvalidConfig) as e:
        load_stream_config(path)
    assert "latin1.json" in str(e.value)
    assert isinstance(e.value.__cause__, UnicodeDecodeError)

    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(InvalidConfig):
        load_stream_config(path)

    path = tmp_path / "stream.json"
    path.write_text(json.dumps(json_stream_config.to_dict()), encoding="utf-8")
    assert load_stream_config(path) == json_stream_config


if __name__ == "__main__":
    import os

    basename = os.path.basename(__file__)
    pytest.main([basename, "-s", "--tb=native"])
