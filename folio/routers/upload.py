from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from folio.config import settings
from folio.errors import BadRequestError
from folio.security import content_length_limit, require_admin
from folio.services.storage import StorageBackend, get_storage
from folio.services.upload_service import normalize_content_type, store_image
from folio.utils.responses import success

router = APIRouter(prefix="/api", tags=["upload"])


@router.post(
    "/upload",
    dependencies=[
        Depends(require_admin),
        Depends(content_length_limit(settings.max_upload_request_bytes)),
    ],
)
async def upload_image(
    request: Request,
    storage: StorageBackend = Depends(get_storage),
):
    """Store one image sent as multipart ``file`` or as the raw request body.

    For a raw body the request's own ``Content-Type`` names the image type.
    """
    content_type = normalize_content_type(request.headers.get("content-type"))
    if content_type == "multipart/form-data":
        async with request.form() as form:
            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                raise BadRequestError("No file provided")
            data = await upload.read()
            stored = await store_image(storage, data, upload.content_type)
    else:
        stored = await store_image(storage, await request.body(), content_type)
    return success({"url": stored.url, "filename": stored.filename}, status_code=201)
