"""
Command-line entry point.

Parses flags, merges them over the settings from the environment and
the dotfile, and runs the upload pipeline once.

Usage:
    minio-image-uploader -src photo.jpg -prefix photos -print-url
    python -m minio_uploader -src photo.jpg -prefix photos -share-url

Exit codes:
    0  upload succeeded
    1  I/O or storage failure (logged to stderr)
    2  missing or invalid configuration (guidance printed to stdout)
"""

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from pydantic import ValidationError

from .config.settings import ConfigurationError, Settings, get_settings
from .core.upload import MetadataStripper, ObjectStore, UploadOrchestrator, UploadRequest
from .infrastructure.metadata import PillowMetadataStripper
from .infrastructure.storage import StorageConfig, StorageError, create_storage_client
from .infrastructure.storage.client import MOCK_BUCKET_NAME

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MISSING_SRC = 'please provide the path to the source file using the "-src" flag'
MISSING_PREFIX = 'please provide a prefix to be prepended when uploading using the "-prefix" flag'
MISSING_ENDPOINT = (
    'Endpoint is not defined. it was neither defined as environment variable '
    'nor as cmdline ("-endpoint s3.example.org") flag'
)
MISSING_ACCESS_KEY = (
    "Access key is not defined. it was neither defined as environment variable "
    "nor as cmdline flag"
)
MISSING_BUCKET = (
    'Bucket name is not defined. it was neither defined as environment variable '
    'nor as cmdline flag ("-bucket my-bucket")'
)
MISSING_SECRET_KEY = (
    'Secret key is not defined. it was neither defined as environment variable '
    'nor as cmdline flag ("-secret-key ...")'
)

StorageFactory = Callable[[StorageConfig, bool], ObjectStore]


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Flags keep their single-dash spelling (-src, -print-url); the
    double-dash form is accepted as well. Value flags default to None
    so we can tell "not given" apart from "given empty".
    """
    parser = argparse.ArgumentParser(
        prog="minio-image-uploader",
        description="Strip metadata from a file and upload it to an S3-compatible bucket.",
        allow_abbrev=False,
    )
    parser.add_argument("-src", "--src", dest="src", default=None,
                        help="the source file you want to upload")
    parser.add_argument("-prefix", "--prefix", dest="prefix", default=None,
                        help="the destination prefix")
    parser.add_argument("-endpoint", "--endpoint", dest="endpoint", default=None,
                        help="the S3 endpoint (env: S3_ENDPOINT)")
    parser.add_argument("-access-key", "--access-key", dest="access_key", default=None,
                        help="the access key (env: S3_ACCESSKEY)")
    parser.add_argument("-bucket", "--bucket", dest="bucket", default=None,
                        help="the name of the S3 bucket (env: S3_BUCKETNAME)")
    parser.add_argument("-secret-key", "--secret-key", dest="secret_key", default=None,
                        help="the secret key (env: S3_SECRETKEY)")
    parser.add_argument("-access-dns", "--access-dns", dest="access_dns", default=None,
                        help="host used in printed URLs (defaults to the endpoint)")
    parser.add_argument("-no-access-dns-bucket-name", "--no-access-dns-bucket-name",
                        dest="no_access_dns_bucket_name", action="store_true",
                        help="leave the bucket name out of printed URLs")
    parser.add_argument("-print-url", "--print-url", dest="print_url", action="store_true",
                        help="print the url to access this object")
    parser.add_argument("-share-url", "--share-url", dest="share_url", action="store_true",
                        help="print a presigned share url valid for 24 hours")
    parser.add_argument("-verbose", "--verbose", dest="verbose", action="store_true",
                        help="log progress to stderr")
    return parser


def _pick(flag_value: Optional[str], setting_value: str) -> str:
    """A flag given on the command line wins over the environment."""
    if flag_value is not None:
        return flag_value
    return setting_value


def resolve_options(
    args: argparse.Namespace,
    settings: Settings,
) -> tuple[UploadRequest, StorageConfig]:
    """
    Merge flags over settings and check that everything required is set.

    Raises ConfigurationError with the guidance for the first missing value.
    """
    src = args.src or ""
    prefix = args.prefix or ""
    endpoint = _pick(args.endpoint, settings.endpoint)
    access_key = _pick(args.access_key, settings.access_key)
    bucket_name = _pick(args.bucket, settings.bucket_name)
    secret_key = _pick(args.secret_key, settings.secret_key)

    if not src:
        raise ConfigurationError(MISSING_SRC)
    if not prefix:
        raise ConfigurationError(MISSING_PREFIX)

    # The in-memory store needs neither an endpoint nor credentials
    if not settings.mock_mode:
        if not endpoint:
            raise ConfigurationError(MISSING_ENDPOINT)
        if not access_key:
            raise ConfigurationError(MISSING_ACCESS_KEY)
        if not bucket_name:
            raise ConfigurationError(MISSING_BUCKET)
        if not secret_key:
            raise ConfigurationError(MISSING_SECRET_KEY)
    elif not bucket_name:
        bucket_name = MOCK_BUCKET_NAME

    request = UploadRequest(
        source_path=src,
        prefix=prefix,
        bucket_name=bucket_name,
        access_dns=args.access_dns or endpoint,
        include_bucket_in_url=not args.no_access_dns_bucket_name,
        print_url=args.print_url,
        share_url=args.share_url,
    )
    storage_config = StorageConfig(
        endpoint=endpoint,
        access_key_id=access_key,
        secret_access_key=secret_key,
        bucket_name=bucket_name,
        use_ssl=settings.use_ssl,
        region=settings.region,
    )
    return request, storage_config


def configure_logging(verbose: bool, level_name: Optional[str] = None) -> None:
    """
    Send logs to stderr so stdout only ever carries the result line.

    Quiet by default; -verbose turns on debug output.
    """
    if verbose:
        level = logging.DEBUG
    elif level_name:
        level = getattr(logging, level_name.upper(), logging.WARNING)
    else:
        level = logging.WARNING

    logging.basicConfig(format=LOG_FORMAT, level=level, stream=sys.stderr)


def main(
    argv: Optional[Sequence[str]] = None,
    storage_factory: StorageFactory = create_storage_client,
    stripper: Optional[MetadataStripper] = None,
) -> int:
    """
    Run one upload and return the process exit code.

    This is the single place where errors turn into exit codes. The
    staged temp file is already removed by the time an error gets here.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging(args.verbose)
        print(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    configure_logging(args.verbose, settings.log_level)

    try:
        request, storage_config = resolve_options(args, settings)
    except ConfigurationError as e:
        print(e)
        return EXIT_CONFIG

    try:
        storage = storage_factory(storage_config, settings.mock_mode)
        orchestrator = UploadOrchestrator(
            storage=storage,
            stripper=stripper or PillowMetadataStripper(),
        )
        result = orchestrator.run(request)
    except (OSError, StorageError) as e:
        logger.error(
            "Upload failed: %s",
            e,
            extra={"source_path": request.source_path, "error": str(e)}
        )
        return EXIT_FAILURE

    print(result.output)
    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
