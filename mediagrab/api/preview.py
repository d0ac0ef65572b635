from typing import Callable, Union

from fastapi import APIRouter, Depends, HTTPException, Request

from mediagrab.api.deps import get_preview_service, get_translator
from mediagrab.api.errors import http_error
from mediagrab.core.logging import log_error, log_info
from mediagrab.models.request import PreviewRequest
from mediagrab.models.response import MediaPreview, PlaylistPreview
from mediagrab.services.preview import PreviewService
from mediagrab.utils.locale import safe_url_for_log

router = APIRouter()


@router.post(
    "/preview",
    response_model=Union[PlaylistPreview, MediaPreview],
    response_model_exclude_none=True,
)
async def preview(
    request: Request,
    body: PreviewRequest,
    service: PreviewService = Depends(get_preview_service),
    _: Callable[..., str] = Depends(get_translator),
):
    """Metadata for a single item or a flattened playlist"""
    if not body.url:
        raise HTTPException(status_code=400, detail=_("error.url_required"))

    log_info(request, _("log.fetching_preview", url=safe_url_for_log(body.url)))

    try:
        result = await service.fetch(body.url, body.type)
    except Exception as e:
        log_error(request, f"Preview error: {str(e)}")
        raise http_error(e, _, "error.preview_failed", with_help=True)

    log_info(request, _("log.preview_ready", title=result.title))
    return result
