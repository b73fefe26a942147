"""Spreadsheet to CSV conversion and CSV row parsing."""

import io
import re
import warnings
from pathlib import PurePath
from typing import Dict, List

import pandas as pd
from loguru import logger

from ..schemas.files import CsvUpload
from .errors import ServiceError, ValidationError

SPREADSHEET_EXTENSIONS = {".xlsx"}
CSV_LINE_TERMINATOR = "\r\n"


def sanitize_csv_filename(filename: str) -> str:
    """Derive a safe ``.csv`` filename from an uploaded file's name.

    The last extension is dropped, whitespace runs become ``_`` and anything
    other than ASCII word characters and dots is removed.
    """
    stem = re.sub(r"\.[^/.]+$", "", PurePath(filename).name)
    stem = re.sub(r"\s+", "_", stem)
    stem = re.sub(r"[^\w.]", "", stem, flags=re.ASCII)
    return f"{stem}.csv"


def is_spreadsheet(filename: str) -> bool:
    return PurePath(filename).suffix.lower() in SPREADSHEET_EXTENSIONS


def convert_spreadsheet(filename: str, content: bytes) -> CsvUpload:
    """Convert the first worksheet of an ``.xlsx`` workbook to CSV.

    Every row, header included, is written as-is; empty cells become empty
    fields.

    Raises:
        ValidationError: If the file is not an ``.xlsx`` workbook or cannot be read
    """
    if not is_spreadsheet(filename):
        raise ValidationError("Please upload only XLSX files.")

    try:
        frame = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=object,
            engine="openpyxl",
        )
    except Exception as e:
        logger.error(f"Failed to read workbook {filename}: {e}")
        raise ValidationError(f"Could not read spreadsheet {filename}: {e}")

    csv_text = frame.to_csv(
        index=False, header=False, lineterminator=CSV_LINE_TERMINATOR
    )
    converted = CsvUpload(
        filename=sanitize_csv_filename(filename), content=csv_text.encode("utf-8")
    )
    logger.debug(
        f"Converted {filename} to {converted.filename} ({len(frame)} rows)"
    )
    return converted


def parse_csv_rows(content: bytes, source: str = "") -> List[Dict[str, str]]:
    """Parse CSV bytes into row objects keyed by the header line.

    Values are matched to header names by position and kept as strings.
    Fields past the last header column are dropped, missing trailing fields
    become empty strings and repeated header names get pandas' ``.1``, ``.2``
    suffixes.
    """
    if not content.strip():
        return []
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            # index_col=False keeps a longer first row from becoming the index
            frame = pd.read_csv(
                io.BytesIO(content),
                dtype=object,
                na_filter=False,
                encoding="utf-8-sig",
                engine="python",
                index_col=False,
            )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse CSV {source}: {e}")
        raise ServiceError(f"Error reading CSV files: could not parse {source}: {e}")

    if any(issubclass(w.category, pd.errors.ParserWarning) for w in caught):
        logger.warning(f"Dropped fields beyond the header in CSV {source}")
    frame = frame.where(frame.notna(), "")
    return frame.to_dict(orient="records")
