"""Pydantic schemas."""

from .files import CsvUpload, FileEntry

__all__ = ["CsvUpload", "FileEntry"]
