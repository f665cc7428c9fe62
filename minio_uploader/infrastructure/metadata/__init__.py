"""
Metadata stripping for images.

Wraps Pillow behind the MetadataStripper protocol from the core package.
"""

from .stripper import PillowMetadataStripper

__all__ = ["PillowMetadataStripper"]
