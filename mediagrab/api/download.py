from typing import Callable, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from mediagrab.api.deps import (
    get_archive_service,
    get_config,
    get_delivery_service,
    get_link_service,
    get_translator,
)
from mediagrab.api.errors import http_error
from mediagrab.config.settings import Config
from mediagrab.core.logging import log_error, log_info
from mediagrab.models.internal import MediaKind
from mediagrab.models.request import DirectUrlRequest, ZipRequest
from mediagrab.models.response import DirectLink, DirectLinkBatch
from mediagrab.services.archive import ArchiveService
from mediagrab.services.delivery import DeliveryService
from mediagrab.services.links import DirectLinkService
from mediagrab.utils.locale import safe_url_for_log

router = APIRouter()


@router.get("/download")
async def download(
    request: Request,
    url: Optional[str] = Query(None, description="Source URL"),
    kind: Optional[str] = Query(None, description="video or audio"),
    format_id: Optional[str] = Query(None, alias="formatId", description="Explicit format id"),
    service: DeliveryService = Depends(get_delivery_service),
    config: Config = Depends(get_config),
    _: Callable[..., str] = Depends(get_translator),
):
    """Download one item as a binary attachment"""
    url = (url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail=_("error.url_required"))

    media_kind = MediaKind.parse(kind)
    log_info(request, _("log.starting_download", url=safe_url_for_log(url), kind=media_kind.value))

    try:
        media = await service.deliver(
            url,
            media_kind,
            format_id=format_id or None,
            is_disconnected=request.is_disconnected,
        )
    except Exception as e:
        log_error(request, f"Download error: {str(e)}")
        raise http_error(e, _, "error.download_failed")

    log_info(request, _("log.download_ready", filename=media.filename, size=len(media.payload)))

    return StreamingResponse(
        media.iter_chunks(config.download.chunk_size),
        media_type=media.content_type,
        headers=media.headers,
    )


@router.post(
    "/download-url",
    response_model=Union[DirectLinkBatch, DirectLink],
)
async def download_url(
    request: Request,
    body: DirectUrlRequest,
    service: DirectLinkService = Depends(get_link_service),
    _: Callable[..., str] = Depends(get_translator),
):
    """Resolve direct media URLs without proxying bytes"""
    if not body.url and not body.urls:
        raise HTTPException(status_code=400, detail=_("error.urls_required"))

    try:
        if body.url:
            log_info(request, _("log.resolving_links", count=1))
            return await service.resolve(body.url, body.media_kind)

        log_info(request, _("log.resolving_links", count=len(body.urls)))
        items = await service.resolve_many(body.urls, body.media_kind)
        return DirectLinkBatch(items=items)
    except Exception as e:
        log_error(request, f"Direct link error: {str(e)}")
        raise http_error(e, _, "error.links_failed")


@router.post("/download-zip")
async def download_zip(
    request: Request,
    body: ZipRequest,
    service: ArchiveService = Depends(get_archive_service),
    _: Callable[..., str] = Depends(get_translator),
):
    """Stream several items as one ZIP archive"""
    if len(body.urls) < 2:
        raise HTTPException(status_code=400, detail=_("error.zip_min_urls"))

    kind = body.media_kind
    log_info(request, _("log.starting_zip", count=len(body.urls), kind=kind.value))

    try:
        items = await service.prepare(body.urls)
    except Exception as e:
        log_error(request, f"ZIP preparation error: {str(e)}")
        raise http_error(e, _, "error.zip_failed")

    async def archive_stream():
        try:
            async for chunk in service.stream(items, kind):
                yield chunk
        except Exception as e:
            # Headers are already sent; all that is left is to cut the stream
            log_error(request, f"ZIP stream error: {str(e)}")
            raise

    return StreamingResponse(
        archive_stream(),
        media_type="application/zip",
        headers=service.headers(items),
    )
