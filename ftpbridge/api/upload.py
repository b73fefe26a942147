"""Upload endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse

from ..core.dependencies import get_ftp_gateway, get_layout
from ..core.environment import LayoutSettings
from ..core.ftp_gateway import FTPGateway
from ..schemas.files import CsvUpload

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/csv", response_class=PlainTextResponse)
def upload_csv(
    files: Optional[List[UploadFile]] = File(None),
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> str:
    """Upload CSV files into the partner inbox.

    Args:
        files: Multipart ``files`` field, one part per CSV file

    Returns:
        str: Confirmation message
    """
    batch = [
        CsvUpload(filename=upload.filename or "", content=upload.file.read())
        for upload in files or []
    ]
    gateway.upload_files(layout.inbox_dir, batch)
    return "Files uploaded successfully."
