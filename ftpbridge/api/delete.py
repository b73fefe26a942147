"""Deletion endpoints."""

import posixpath

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..core.dependencies import get_ftp_gateway, get_layout
from ..core.environment import LayoutSettings
from ..core.errors import ValidationError
from ..core.ftp_gateway import FTPGateway, validate_filename

router = APIRouter(prefix="/delete", tags=["delete"])


@router.delete("/file/{filename}", response_class=PlainTextResponse)
def delete_file(
    filename: str,
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> str:
    """Delete one file from the partner inbox."""
    name = validate_filename(filename)
    gateway.delete_file(posixpath.join(layout.inbox_dir, name))
    return "File deleted successfully."


@router.delete("/file", response_class=PlainTextResponse, include_in_schema=False)
@router.delete("/file/", response_class=PlainTextResponse, include_in_schema=False)
def delete_file_without_name() -> str:
    raise ValidationError("Filename is required.")


@router.delete("/all/dhl", response_class=PlainTextResponse)
def delete_all_inbox_files(
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> str:
    """Delete every file (not folder) in the partner inbox."""
    gateway.delete_all_in_folder(layout.inbox_dir)
    return "All files deleted successfully."
