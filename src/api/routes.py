"""FastAPI routes for hosuto.

Endpoint                 Method  Description
----------------------------------------------------------------------
/                        GET     301 redirect to the project page
/.update                 GET     Force a cache refresh, report its size
/{image}                 GET     Serve the default ("public") variant
/{image}/{variant}       GET     Serve a named variant

``/.update`` is registered before the image routes so the literal path
wins over the ``{image}`` placeholder.  Every path is also served with a
trailing slash; the app is built with ``redirect_slashes=False`` so those
are answered directly instead of redirected.  Services are resolved from
``app.state`` (populated in main.py's lifespan) through ``Depends``.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from src.api.schemas import ErrorResponse, UpdateResponse
from src.services.cache_synchronizer import CacheSynchronizer
from src.services.delivery import DeliveryAssembler
from src.services.image_resolver import ImageResolver
from src.utils.errors import ImageNotFoundError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_DEFAULT_REDIRECT_URL = "https://github.com/tycrek/hosuto"


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_synchronizer(request: Request) -> CacheSynchronizer:
    """Return the cache synchronizer from application state."""
    return request.app.state.synchronizer


def _get_resolver(request: Request) -> ImageResolver:
    """Return the image resolver from application state."""
    return request.app.state.resolver


def _get_assembler(request: Request) -> DeliveryAssembler:
    """Return the delivery assembler from application state."""
    return request.app.state.assembler


SynchronizerDep = Annotated[CacheSynchronizer, Depends(_get_synchronizer)]
ResolverDep = Annotated[ImageResolver, Depends(_get_resolver)]
AssemblerDep = Annotated[DeliveryAssembler, Depends(_get_assembler)]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/", include_in_schema=False)
async def index(request: Request) -> RedirectResponse:
    """Redirect to the project information page."""
    url = getattr(request.app.state, "redirect_url", _DEFAULT_REDIRECT_URL)
    return RedirectResponse(url=url, status_code=301)


@router.get("/.update/", response_model=UpdateResponse, include_in_schema=False)
@router.get(
    "/.update",
    response_model=UpdateResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Force a cache refresh",
)
async def update_cache(synchronizer: SynchronizerDep) -> UpdateResponse:
    """Refetch the full image directory and rewrite the cache."""
    result = await synchronizer.force_refresh()
    return UpdateResponse(updated=result.updated, size=f"{result.size_mib} MiB")


@router.get("/{image}/{variant}/", include_in_schema=False)
@router.get(
    "/{image}/{variant}",
    responses={404: {"content": {"text/plain": {}}}, 502: {"model": ErrorResponse}},
    summary="Serve a named variant of an image",
)
async def get_image_variant(
    image: str,
    variant: str,
    synchronizer: SynchronizerDep,
    resolver: ResolverDep,
    assembler: AssemblerDep,
) -> Response:
    return await _serve(image, variant, synchronizer, resolver, assembler)


@router.get("/{image}/", include_in_schema=False)
@router.get(
    "/{image}",
    responses={404: {"content": {"text/plain": {}}}, 502: {"model": ErrorResponse}},
    summary="Serve the default variant of an image",
)
async def get_image(
    image: str,
    synchronizer: SynchronizerDep,
    resolver: ResolverDep,
    assembler: AssemblerDep,
) -> Response:
    return await _serve(image, None, synchronizer, resolver, assembler)


async def _serve(
    image: str,
    variant: str | None,
    synchronizer: CacheSynchronizer,
    resolver: ImageResolver,
    assembler: DeliveryAssembler,
) -> Response:
    """Directory -> resolution -> delivery, or a plain-text 404."""
    directory = await synchronizer.resolve_directory()
    try:
        resolution = resolver.resolve(directory, image, variant)
    except ImageNotFoundError as exc:
        return PlainTextResponse(exc.message, status_code=404)
    return await assembler.deliver(resolution)
