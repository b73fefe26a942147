"""Remote listing endpoints."""

from typing import Dict, List

from fastapi import APIRouter, Depends
from loguru import logger

from ..core.civil_time import filter_modified_today
from ..core.dependencies import get_ftp_gateway, get_layout
from ..core.environment import LayoutSettings
from ..core.ftp_gateway import FTPGateway
from ..schemas.files import FileEntry

router = APIRouter(prefix="/list", tags=["listing"])


@router.get("/files/recents", response_model=List[FileEntry])
@router.get("/files/recents/", response_model=List[FileEntry], include_in_schema=False)
@router.get("/files/dhl", response_model=List[FileEntry])
@router.get("/files/dhl/", response_model=List[FileEntry], include_in_schema=False)
def list_inbox(
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> List[FileEntry]:
    """List the partner inbox, hiding its housekeeping folders."""
    entries = gateway.list_folder(layout.inbox_dir)
    excluded = set(layout.excluded_names)
    return [entry for entry in entries if entry.name not in excluded]


@router.get("/files/processados", response_model=List[FileEntry])
@router.get(
    "/files/processados/", response_model=List[FileEntry], include_in_schema=False
)
def list_processed(
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> List[FileEntry]:
    """List the folder of files the partner has already processed."""
    return gateway.list_folder(layout.processed_dir)


@router.get("/files/processados/today", response_model=List[FileEntry])
def list_processed_today(
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> List[FileEntry]:
    """List processed files modified during the current business day."""
    entries = gateway.list_folder(layout.processed_dir)
    todays = filter_modified_today(entries, tz=layout.business_timezone)
    logger.info(f"{len(todays)} of {len(entries)} processed files are from today")
    return todays


@router.get("/files/processados/csv", response_model=List[Dict[str, str]])
def read_processed_rows(
    gateway: FTPGateway = Depends(get_ftp_gateway),
    layout: LayoutSettings = Depends(get_layout),
) -> List[Dict[str, str]]:
    """Return the rows of every processed CSV file, concatenated."""
    return gateway.read_csv_files(layout.processed_dir)
