"""Purchased content download routes."""
from __future__ import annotations

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, StreamingResponse

from photomarket.api.dependencies import get_current_user, get_export_service
from photomarket.core.security import TokenPayload
from photomarket.services import ExportService

router = APIRouter(prefix="/download")


def content_disposition(filename: str) -> str:
    """Attachment header, RFC 5987 encoded when the name isn't plain ASCII."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.get("/{item_type}/{item_id}")
async def download_item(
    item_type: str,
    item_id: UUID,
    user: TokenPayload = Depends(get_current_user),
    export_service: ExportService = Depends(get_export_service)
):
    """
    Download a purchased photo or album.

    **Parameters:**
    - **item_type**: ``photo`` or ``album``
    - **item_id**: Item UUID

    **Returns:** The original file for a photo, a ZIP archive of all
    originals for an album. Requires a completed order containing the item.
    """
    payload = await export_service.export(item_type, item_id, user.email)

    headers = {
        "Content-Disposition": content_disposition(payload.filename),
        "Cache-Control": "no-cache",
    }
    if payload.is_stream:
        return StreamingResponse(payload.stream, media_type=payload.media_type, headers=headers)

    return FileResponse(payload.path, media_type=payload.media_type, headers=headers)
