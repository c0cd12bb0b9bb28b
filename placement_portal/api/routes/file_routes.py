"""
File Routes

GET /files/{file_id} - Download a stored upload
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from placement_portal.core.auth import Actor, get_current_user
from placement_portal.core.exceptions import NotFound
from placement_portal.services.file_storage import FileStorageService, get_file_storage

router = APIRouter(prefix="/files", tags=["Files"])


@router.get("/{file_id}")
async def download_file(
    file_id: str,
    actor: Actor = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    doc = storage.get(file_id)
    if doc is None:
        raise NotFound("File not found")

    filename = doc.get("filename") or file_id
    return Response(
        content=bytes(doc["data"]),
        media_type=doc.get("content_type") or "application/octet-stream",
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(filename)}"},
    )
