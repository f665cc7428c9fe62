"""
Unit tests for the command-line entry point.

main() takes the storage factory and stripper as arguments, so these
tests run the real argument handling against the in-memory store.
"""

import hashlib

import pytest

from minio_uploader.core.upload.orchestrator import MetadataStripError
from minio_uploader.infrastructure.storage.client import MockStorageClient, StorageError
from minio_uploader.main import (
    EXIT_CONFIG,
    EXIT_FAILURE,
    EXIT_OK,
    MISSING_ACCESS_KEY,
    MISSING_BUCKET,
    MISSING_ENDPOINT,
    MISSING_PREFIX,
    MISSING_SECRET_KEY,
    MISSING_SRC,
    main,
)


class RejectingStripper:
    def strip(self, data: bytes) -> bytes:
        raise MetadataStripError("not an image")


class RecordingFactory:
    """Storage factory that remembers what it was asked to build."""

    def __init__(self) -> None:
        self.calls = []
        self.client = None

    def __call__(self, config, mock_mode):
        self.calls.append((config, mock_mode))
        self.client = MockStorageClient(config.bucket_name)
        return self.client


@pytest.fixture
def s3_env(monkeypatch):
    monkeypatch.setenv("S3_ENDPOINT", "s3.example.org")
    monkeypatch.setenv("S3_ACCESSKEY", "access")
    monkeypatch.setenv("S3_SECRETKEY", "secret")
    monkeypatch.setenv("S3_BUCKETNAME", "bucket")


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"0123456789")
    return path


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


def run_main(argv, factory):
    return main(argv, storage_factory=factory, stripper=RejectingStripper())


class TestMissingConfiguration:
    """Missing values print guidance and never reach the store."""

    @pytest.mark.parametrize(
        "argv, message",
        [
            ([], MISSING_SRC),
            (["-src", "photo.jpg"], MISSING_PREFIX),
            (["-src", "photo.jpg", "-prefix", ""], MISSING_PREFIX),
        ],
    )
    def test_missing_flags(self, argv, message, factory, s3_env, capsys):
        assert run_main(argv, factory) == EXIT_CONFIG
        assert capsys.readouterr().out.strip() == message
        assert factory.calls == []

    @pytest.mark.parametrize(
        "unset, message",
        [
            ("S3_ENDPOINT", MISSING_ENDPOINT),
            ("S3_ACCESSKEY", MISSING_ACCESS_KEY),
            ("S3_BUCKETNAME", MISSING_BUCKET),
            ("S3_SECRETKEY", MISSING_SECRET_KEY),
        ],
    )
    def test_missing_store_settings(self, unset, message, factory, s3_env, monkeypatch, capsys):
        monkeypatch.delenv(unset)

        code = run_main(["-src", "photo.jpg", "-prefix", "photos"], factory)

        assert code == EXIT_CONFIG
        assert capsys.readouterr().out.strip() == message
        assert factory.calls == []

    def test_invalid_environment_value(self, factory, s3_env, monkeypatch, capsys):
        monkeypatch.setenv("S3_MOCK_MODE", "sometimes")

        code = run_main(["-src", "photo.jpg", "-prefix", "photos"], factory)

        assert code == EXIT_CONFIG
        assert "Invalid configuration" in capsys.readouterr().out
        assert factory.calls == []


class TestSuccessfulUpload:
    """End-to-end runs against the in-memory store."""

    def test_print_url(self, photo, factory, s3_env, capsys):
        code = run_main(["-src", str(photo), "-prefix", "photos", "-print-url"], factory)

        digest = hashlib.sha256(b"0123456789").hexdigest()
        key = f"photos/{digest}/photo.jpg"
        assert code == EXIT_OK
        assert capsys.readouterr().out == f"https://s3.example.org/bucket/{key}\n"
        assert factory.client.objects[key].content_type == "image/jpeg"

    def test_confirmation_line(self, photo, factory, s3_env, capsys):
        code = run_main(["-src", str(photo), "-prefix", "photos"], factory)

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert out.startswith(f"Uploaded {photo} to bucket/photos/")
        assert out.count("\n") == 1

    def test_access_dns_without_bucket(self, photo, factory, s3_env, capsys):
        run_main(
            [
                "-src", str(photo), "-prefix", "p", "-print-url",
                "-access-dns", "cdn.example.org", "-no-access-dns-bucket-name",
            ],
            factory,
        )

        assert capsys.readouterr().out.startswith("https://cdn.example.org/p/")

    def test_share_url(self, photo, factory, s3_env, capsys):
        run_main(["-src", str(photo), "-prefix", "p", "-share-url"], factory)

        out = capsys.readouterr().out.strip()
        assert out.startswith("mock://storage/bucket/p/")
        assert out.endswith("?expires=86400")

    def test_double_dash_flags_accepted(self, photo, factory, s3_env, capsys):
        code = run_main(["--src", str(photo), "--prefix", "p", "--print-url"], factory)

        assert code == EXIT_OK
        assert capsys.readouterr().out.startswith("https://s3.example.org/bucket/p/")

    def test_flags_override_environment(self, photo, factory, s3_env, capsys):
        run_main(
            [
                "-src", str(photo), "-prefix", "p",
                "-endpoint", "other.example.org", "-bucket", "flag-bucket",
                "-access-key", "flag-access", "-secret-key", "flag-secret",
            ],
            factory,
        )

        config, mock_mode = factory.calls[0]
        assert config.endpoint == "other.example.org"
        assert config.bucket_name == "flag-bucket"
        assert config.access_key_id == "flag-access"
        assert config.secret_access_key == "flag-secret"
        assert not mock_mode
        assert "to flag-bucket/p/" in capsys.readouterr().out

    def test_access_dns_defaults_to_endpoint_flag(self, photo, factory, s3_env, capsys):
        run_main(
            ["-src", str(photo), "-prefix", "p", "-print-url", "-endpoint", "other.example.org"],
            factory,
        )

        assert capsys.readouterr().out.startswith("https://other.example.org/bucket/p/")

    def test_usessl_false_reaches_storage_config(self, photo, factory, s3_env, monkeypatch):
        monkeypatch.setenv("S3_USESSL", "false")

        run_main(["-src", str(photo), "-prefix", "p"], factory)

        config, _ = factory.calls[0]
        assert config.endpoint_url == "http://s3.example.org"

    def test_mock_mode_needs_no_credentials(self, photo, monkeypatch, capsys):
        monkeypatch.setenv("S3_MOCK_MODE", "true")

        code = main(["-src", str(photo), "-prefix", "p"], stripper=RejectingStripper())

        assert code == EXIT_OK
        assert capsys.readouterr().out.startswith(f"Uploaded {photo} to mock-bucket/p/")

    def test_empty_usessl_keeps_https(self, photo, factory, s3_env, monkeypatch):
        monkeypatch.setenv("S3_USESSL", "")

        code = run_main(["-src", str(photo), "-prefix", "p"], factory)

        config, _ = factory.calls[0]
        assert code == EXIT_OK
        assert config.endpoint_url == "https://s3.example.org"

    def test_unprefixed_mock_mode_does_not_skip_credentials(self, photo, factory, monkeypatch, capsys):
        """A stray MOCK_MODE from another tool must not turn a real upload into a fake one."""
        monkeypatch.setenv("MOCK_MODE", "true")

        code = run_main(["-src", str(photo), "-prefix", "p"], factory)

        assert code == EXIT_CONFIG
        assert capsys.readouterr().out.strip() == MISSING_ENDPOINT
        assert factory.calls == []


class TestFailures:
    """Runtime failures exit 1, print nothing to stdout and are logged once."""

    def test_missing_source_file(self, tmp_path, factory, s3_env, capsys, caplog):
        code = run_main(["-src", str(tmp_path / "nope.jpg"), "-prefix", "p"], factory)

        assert code == EXIT_FAILURE
        assert capsys.readouterr().out == ""
        assert "nope.jpg" in caplog.text

    def test_storage_error(self, photo, s3_env, capsys, caplog):
        class BrokenStorage(MockStorageClient):
            def upload_file(self, file_path, object_key, content_type, tags):
                raise StorageError("Upload failed: access denied")

        code = main(
            ["-src", str(photo), "-prefix", "p"],
            storage_factory=lambda config, mock_mode: BrokenStorage(),
            stripper=RejectingStripper(),
        )

        assert code == EXIT_FAILURE
        assert capsys.readouterr().out == ""
        assert "access denied" in caplog.text

    def test_failure_reported_once(self, tmp_path, factory, s3_env, capsys, caplog):
        run_main(["-src", str(tmp_path / "nope.jpg"), "-prefix", "p"], factory)

        errors = [r for r in caplog.records if r.levelname == "ERROR" and r.name == "minio_uploader.main"]
        assert len(errors) == 1
        assert "error:" not in capsys.readouterr().err
