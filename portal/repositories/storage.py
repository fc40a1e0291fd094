"""
Resume Storage

Stores uploaded resumes in a GridFS bucket next to the portal tables.
Files are written once and never modified; the application row keeps
the public URL of the stored file.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator

from bson import ObjectId
from gridfs import GridFSBucket, GridOut
from pymongo.database import Database

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024


@dataclass
class StoredResume:
    """A resume read back from storage."""
    file_id: str
    filename: str
    content_type: str
    length: int
    chunks: Iterator[bytes]


def _read_chunks(grid_out: GridOut) -> Iterator[bytes]:
    try:
        while True:
            chunk = grid_out.read(CHUNK_SIZE)
            if not chunk:
                return
            yield chunk
    finally:
        grid_out.close()


class ResumeStorage:
    """Upload, stream and delete resumes in one GridFS bucket."""

    def __init__(self, database: Database, bucket_name: str = "resumes"):
        self._bucket = GridFSBucket(database, bucket_name=bucket_name)
        self.bucket_name = bucket_name

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """
        Store a file and return its id.

        Args:
            data: Raw file bytes
            filename: Storage file name (see validation.resume_storage_name)
            content_type: MIME type reported by the browser

        Returns:
            The new file id as a string
        """
        metadata: Dict[str, Any] = {"contentType": content_type}
        file_id = self._bucket.upload_from_stream(filename, data, metadata=metadata)
        logger.info(f"Stored resume {filename} ({len(data)} bytes) as {file_id}")
        return str(file_id)

    def open(self, file_id: str) -> StoredResume:
        """
        Open a stored file for streaming.

        Raises:
            gridfs.errors.NoFile: if no file has this id
        """
        grid_out = self._bucket.open_download_stream(ObjectId(file_id))
        metadata = grid_out.metadata or {}
        return StoredResume(
            file_id=file_id,
            filename=grid_out.filename,
            content_type=metadata.get("contentType", "application/octet-stream"),
            length=grid_out.length,
            chunks=_read_chunks(grid_out),
        )

    def delete(self, file_id: str) -> None:
        """Delete a stored file."""
        self._bucket.delete(ObjectId(file_id))
        logger.info(f"Deleted resume {file_id}")
