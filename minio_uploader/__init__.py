"""
minio-image-uploader - strip metadata from a file and upload it to S3-compatible storage.

This package contains the complete tool:
- core: Framework-agnostic naming, hashing and upload pipeline
- infrastructure: boto3 storage client and Pillow metadata stripper
- config: Settings from the environment and the user's dotfile
- main: Command-line entry point
"""

__version__ = "0.1.0"
