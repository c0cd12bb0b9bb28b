"""
File Storage Service - uploaded documents kept in MongoDB.

Resumes, company logos and announcement attachments are stored as binary
documents in the `uploaded_files` collection. The relational store only
keeps the URL `store()` returns.
"""

from typing import Optional

from bson import Binary, ObjectId
from pymongo.collection import Collection

from placement_portal.db.mongodb import COLLECTIONS, get_collection
from placement_portal.models.base import utcnow


def file_url(file_id: str) -> str:
    return f"/api/files/{file_id}"


class FileStorageService:
    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = get_collection(COLLECTIONS["uploaded_files"])
        return self._collection

    def store(self, data: bytes, filename: str, content_type: str, owner_user_id: int, kind: str) -> str:
        """
        Save `data` and return the URL it is served from.

        Args:
            data: Raw file bytes
            filename: Original filename (kept for the download header)
            content_type: MIME type reported by the client
            owner_user_id: Uploading user
            kind: "resume", "logo" or "attachment"
        """
        doc = {
            "filename": filename,
            "content_type": content_type or "application/octet-stream",
            "size": len(data),
            "data": Binary(data),
            "owner_user_id": owner_user_id,
            "kind": kind,
            "uploaded_at": utcnow(),
        }
        result = self.collection.insert_one(doc)
        return file_url(str(result.inserted_id))

    def get(self, file_id: str) -> Optional[dict]:
        """Stored document by id, or None for an unknown or malformed id."""
        if not ObjectId.is_valid(file_id):
            return None
        return self.collection.find_one({"_id": ObjectId(file_id)})


_storage: Optional[FileStorageService] = None


def get_file_storage() -> FileStorageService:
    """FastAPI dependency; tests override it with an in-memory store."""
    global _storage
    if _storage is None:
        _storage = FileStorageService()
    return _storage
