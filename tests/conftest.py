"""
Shared fixtures.

Every test runs with a throwaway HOME and no S3_* variables, so a real
~/.config/minio-image-uploader.env on the developer's machine can never
leak into a test.
"""

import pytest

from minio_uploader.config.settings import get_settings

S3_ENV_VARS = (
    "S3_ENDPOINT",
    "S3_ACCESSKEY",
    "S3_SECRETKEY",
    "S3_BUCKETNAME",
    "S3_USESSL",
    "S3_REGION",
    "S3_MOCK_MODE",
    "S3_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in S3_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()
