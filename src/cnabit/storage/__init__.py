"""Blob storage adapters for uploaded files."""

from cnabit.storage.base import FileStorage
from cnabit.storage.local import LocalFileStorage
from cnabit.storage.s3 import S3FileStorage

__all__ = ["FileStorage", "LocalFileStorage", "S3FileStorage"]
