"""Gateway to the partner's FTP server.

Every public method opens its own connection, performs one logical operation
and closes the connection again, whether the operation succeeded or not.
Nothing is cached or shared between calls.
"""

import ftplib
import io
import posixpath
from contextlib import contextmanager
from pathlib import PurePosixPath
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from loguru import logger

from ..schemas.files import CsvUpload, FileEntry
from .environment import FTPSettings
from .errors import FTPConnectionError, RemoteOperationError, ValidationError
from .listing import entries_from_list, entries_from_mlsd
from .metrics import FTP_OPERATIONS
from .spreadsheet import parse_csv_rows

MLSD_FACTS = ["type", "size", "modify"]
# Reply codes meaning "MLSD not implemented/understood"
MLSD_UNSUPPORTED = ("500", "501", "502", "504")


def validate_upload_batch(files: Sequence[CsvUpload]) -> None:
    """Reject a batch unless every file is a plain ``.csv`` filename.

    Raises:
        ValidationError: If the batch is empty or any file is not acceptable
    """
    if not files:
        raise ValidationError("Please upload valid CSV files.")
    for upload in files:
        name = upload.filename or ""
        if not name.endswith(".csv") or PurePosixPath(name).name != name:
            logger.warning(f"Rejected upload batch because of {name!r}")
            raise ValidationError("Please upload valid CSV files.")


def validate_filename(filename: Optional[str]) -> str:
    """Return ``filename`` if it names a single remote file.

    Raises:
        ValidationError: If the name is missing, blank or contains a path
    """
    if filename is None or not filename.strip():
        raise ValidationError("Filename is required.")
    if PurePosixPath(filename).name != filename or filename in (".", ".."):
        raise ValidationError(f"Invalid filename: {filename}")
    return filename


class FTPGateway:
    """Stateless FTP operations bound to one set of connection settings."""

    def __init__(
        self,
        settings: FTPSettings,
        ftp_factory: Optional[Callable[[], ftplib.FTP]] = None,
    ):
        self.settings = settings
        self._ftp_factory = ftp_factory or self._default_factory

    def _default_factory(self) -> ftplib.FTP:
        ftp_class = ftplib.FTP_TLS if self.settings.ftp_secure else ftplib.FTP
        kwargs = {"encoding": self.settings.ftp_encoding}
        if self.settings.ftp_timeout is not None:
            kwargs["timeout"] = self.settings.ftp_timeout
        return ftp_class(**kwargs)

    @contextmanager
    def connection(self) -> Iterator[ftplib.FTP]:
        """Open a logged-in connection and always close it afterwards.

        Raises:
            FTPConnectionError: If connecting or logging in fails
        """
        ftp = self._ftp_factory()
        ftp.set_debuglevel(self.settings.ftp_debug_level)
        try:
            try:
                ftp.connect(self.settings.ftp_host, self.settings.ftp_port)
                ftp.login(self.settings.ftp_user, self.settings.ftp_password)
                if self.settings.ftp_secure:
                    ftp.prot_p()
            except ftplib.all_errors as e:
                logger.error(
                    f"Error accessing FTP {self.settings.ftp_host}:{self.settings.ftp_port}: {e}"
                )
                raise FTPConnectionError(f"Error accessing FTP: {e}") from e
            yield ftp
        finally:
            ftp.close()

    @contextmanager
    def _operation(self, name: str, error_message: str) -> Iterator[ftplib.FTP]:
        """Run one gateway operation on a fresh connection.

        ftplib failures inside the block surface as ``RemoteOperationError``.
        """
        outcome = "error"
        try:
            with self.connection() as ftp:
                try:
                    yield ftp
                except ftplib.all_errors as e:
                    logger.error(f"{error_message}: {e}")
                    raise RemoteOperationError(f"{error_message}: {e}") from e
            outcome = "success"
        finally:
            FTP_OPERATIONS.labels(operation=name, outcome=outcome).inc()

    def _list(self, ftp: ftplib.FTP, path: str) -> List[FileEntry]:
        try:
            return entries_from_mlsd(ftp.mlsd(path, facts=MLSD_FACTS))
        except ftplib.error_perm as e:
            if not str(e).startswith(MLSD_UNSUPPORTED):
                raise
            logger.debug(f"MLSD unsupported ({e}), falling back to LIST")

        lines: List[str] = []
        ftp.retrlines(f"LIST {path}", lines.append)
        return entries_from_list(lines)

    def list_folder(self, path: str) -> List[FileEntry]:
        """List one remote directory, non-recursively."""
        with self._operation("list", "Error accessing FTP") as ftp:
            entries = self._list(ftp, path)
        logger.info(f"Listed {len(entries)} entries in {path}")
        return entries

    def upload_files(self, path: str, files: Sequence[CsvUpload]) -> List[str]:
        """Upload a batch of CSV files into ``path``, in order.

        The whole batch is validated before connecting. The first failed
        upload aborts the remaining ones; files already stored stay stored.

        Returns:
            Names of the uploaded files
        """
        validate_upload_batch(files)
        logger.info(f"Received files: {[upload.filename for upload in files]}")

        uploaded = []
        with self._operation("upload", "Error uploading files") as ftp:
            for upload in files:
                remote_path = posixpath.join(path, upload.filename)
                logger.info(f"Uploading {upload.filename} to {remote_path}")
                ftp.storbinary(f"STOR {remote_path}", io.BytesIO(upload.content))
                uploaded.append(upload.filename)
                logger.info(f"File {upload.filename} uploaded successfully")
        return uploaded

    def delete_file(self, path: str) -> None:
        """Delete one remote file. Deleting a missing file is an error."""
        with self._operation("delete", "Error deleting file") as ftp:
            logger.info(f"Deleting {path}")
            ftp.delete(path)
        logger.info(f"Deleted {path}")

    def delete_all_in_folder(self, path: str) -> List[str]:
        """Delete every non-directory entry of ``path``.

        Stops at the first failure; files removed before it stay removed.

        Returns:
            Names of the deleted files
        """
        deleted = []
        with self._operation("delete_all", "Error deleting files") as ftp:
            logger.info(f"Listing files to delete from {path}")
            for entry in self._list(ftp, path):
                if entry.is_directory:
                    continue
                ftp.delete(posixpath.join(path, entry.name))
                deleted.append(entry.name)
                logger.info(f"Deleted {entry.name}")
        logger.info(f"Deleted {len(deleted)} files from {path}")
        return deleted

    def read_csv_files(self, path: str) -> List[Dict[str, str]]:
        """Download every ``.csv`` file in ``path`` and concatenate their rows."""
        rows: List[Dict[str, str]] = []
        with self._operation("read_csv", "Error reading CSV files") as ftp:
            for entry in self._list(ftp, path):
                if entry.is_directory or not entry.name.endswith(".csv"):
                    continue
                remote_path = posixpath.join(path, entry.name)
                buffer = io.BytesIO()
                ftp.retrbinary(f"RETR {remote_path}", buffer.write)
                rows.extend(parse_csv_rows(buffer.getvalue(), source=entry.name))
        logger.info(f"Read {len(rows)} CSV rows from {path}")
        return rows

    def check_connection(self) -> bool:
        """Check that the server accepts a login."""
        try:
            with self.connection() as ftp:
                ftp.voidcmd("NOOP")
            return True
        except (FTPConnectionError, *ftplib.all_errors) as e:
            logger.error(f"FTP health check failed: {e}")
            return False
