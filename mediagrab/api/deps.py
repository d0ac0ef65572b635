import functools
from typing import Callable

from fastapi import Depends, Request

from mediagrab.config.settings import Config
from mediagrab.i18n import i18n
from mediagrab.services.archive import ArchiveService
from mediagrab.services.delivery import DeliveryService
from mediagrab.services.extractor import FileFetcher, MediaExtractor
from mediagrab.services.links import DirectLinkService
from mediagrab.services.preview import PreviewService
from mediagrab.utils.locale import get_locale


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_extractor(request: Request) -> MediaExtractor:
    return request.app.state.extractor


def get_fallback(request: Request) -> FileFetcher:
    return request.app.state.fallback


def get_translator(request: Request, config: Config = Depends(get_config)) -> Callable[..., str]:
    """i18n lookup bound to the request's Accept-Language"""
    locale = get_locale(
        request.headers.get("accept-language"),
        supported=config.i18n.supported_locales,
        default=config.i18n.default_locale,
    )
    return functools.partial(i18n.get, locale=locale)


def get_preview_service(extractor: MediaExtractor = Depends(get_extractor)) -> PreviewService:
    return PreviewService(extractor)


def get_delivery_service(
    config: Config = Depends(get_config),
    extractor: MediaExtractor = Depends(get_extractor),
    fallback: FileFetcher = Depends(get_fallback),
) -> DeliveryService:
    return DeliveryService(config, extractor, fallback)


def get_archive_service(
    config: Config = Depends(get_config),
    extractor: MediaExtractor = Depends(get_extractor),
) -> ArchiveService:
    return ArchiveService(config, extractor)


def get_link_service(
    config: Config = Depends(get_config),
    extractor: MediaExtractor = Depends(get_extractor),
) -> DirectLinkService:
    return DirectLinkService(config, extractor)
