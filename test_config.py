"""設定クラスのテスト"""
import json

import pytest

from image_uploader.models.config import AssumeRoleConfig, Config, StoreConfig, UploadOptions, UploadTask

CONFIG_DATA = {
    "logging": {"level": "DEBUG", "file": "logs/image_uploader.log"},
    "api": {"base_url": "http://localhost:3000/", "request_timeout": 10},
    "store": {
        "endpoint": "https://nyc3.digitaloceanspaces.com",
        "bucket": "turf",
        "region": "nyc3",
        "assume_role": {
            "role_arn": "arn:aws:iam::123456789012:role/uploader",
            "session_name": "image-uploader",
        },
    },
    "options": {"max_concurrency": 5, "max_attempts": 4, "retry_delay": 1.5},
    "upload_tasks": [
        {"name": "photos", "source": "./photos", "owner_id": "user-1"},
        {"name": "direct", "source": "./raw", "owner_id": "user-2", "mode": "direct", "enabled": False},
    ],
}


def test_config_loading(tmp_path):
    """JSONファイルから読み込める"""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG_DATA), encoding="utf-8")

    config = Config.from_file(str(path))

    assert config.logging.level == "DEBUG"
    assert config.api.base_url == "http://localhost:3000"
    assert config.api.request_timeout == 10
    assert config.api.upload_timeout == 120
    assert config.store.acl == "public-read"
    assert isinstance(config.store.assume_role, AssumeRoleConfig)
    assert config.options.max_concurrency == 5
    assert config.options.supported_formats == ["jpg", "jpeg", "png", "heic", "heif", "webp"]
    assert [task.mode for task in config.upload_tasks] == ["api", "direct"]
    assert not config.upload_tasks[1].enabled


def test_defaults():
    config = Config.from_dict({})
    assert config.api is None
    assert config.store is None
    assert config.upload_tasks == []
    assert config.options.max_attempts == 3
    assert config.options.retry_delay == 2.0
    assert config.options.max_file_size == 10 * 1024 * 1024


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.from_file(str(tmp_path / "missing.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        Config.from_file(str(path))


def test_invalid_values_are_wrapped(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"options": {"max_attempts": 0}}), encoding="utf-8")
    with pytest.raises(RuntimeError):
        Config.from_file(str(path))


@pytest.mark.parametrize("kwargs", [
    {"role_arn": "not-an-arn", "session_name": "ok-name"},
    {"role_arn": "arn:aws:iam::123456789012:role/r", "session_name": " "},
    {"role_arn": "arn:aws:iam::123456789012:role/r", "session_name": "bad name!"},
    {"role_arn": "arn:aws:iam::123456789012:role/r", "session_name": "ok-name", "duration_seconds": 60},
])
def test_assume_role_validation(kwargs):
    with pytest.raises(ValueError):
        AssumeRoleConfig(**kwargs)


def test_store_validation():
    with pytest.raises(ValueError):
        StoreConfig(endpoint="nyc3.digitaloceanspaces.com", bucket="turf", region="nyc3")
    with pytest.raises(ValueError):
        StoreConfig(endpoint="https://nyc3.digitaloceanspaces.com", bucket="", region="nyc3")
    with pytest.raises(TypeError):
        StoreConfig(endpoint="https://x", bucket="b", region="r", assume_role="arn")


def test_options_and_task_validation():
    with pytest.raises(ValueError):
        UploadOptions(max_concurrency=0)
    with pytest.raises(ValueError):
        UploadOptions(retry_delay=-1)
    with pytest.raises(ValueError):
        UploadTask(name="t", source=".", owner_id="u", mode="ftp")
