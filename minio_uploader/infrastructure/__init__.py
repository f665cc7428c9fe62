"""
Infrastructure layer - external library integrations.

Each subdirectory wraps an external dependency:
- storage: S3-compatible object storage (boto3)
- metadata: image metadata stripping (Pillow)
"""
