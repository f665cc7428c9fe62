"""
Core upload logic.

This module is framework-agnostic - it doesn't import boto3, Pillow,
or argparse. The object store and metadata stripper arrive through
protocols, so the pipeline can be tested with in-memory fakes.
"""
