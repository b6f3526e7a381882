# src/api/server.py — v1
"""FastAPI application: the HTTP surface over the facade.

Routes:
    POST /api/chatbot                  breed Q&A through the completion router
    GET  /api/breed-image              resolve (and cache) a breed image
    GET  /api/breed-images/{filename}  serve a cached image
    GET  /api/verify-cache             verification status of the cache
    POST /api/verify-cache             re-verify cached images
    GET  /api/health                   provider and cache directory checks
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from breedlens.api import facade
from breedlens.api.facade import BreedLensServices
from breedlens.api.models import (
    AskRequest,
    AskResponse,
    BreedImageResponse,
    HealthResponse,
    VerifyCacheRequest,
)
from breedlens.cache.maintenance import cache_status, verify_cache
from breedlens.config.settings import Settings
from breedlens.core.errors import ImageNotFound, InvalidFilenameToken
from breedlens.core.models import Species
from breedlens.version import __version__

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["breedlens"])


def get_services(request: Request) -> BreedLensServices:
    return request.app.state.services


@router.post("/chatbot", response_model=AskResponse)
async def chatbot(body: AskRequest, request: Request) -> AskResponse:
    """Answer a question about a breed; never fails on provider outages."""
    return await facade.ask(
        get_services(request),
        question=body.question,
        breed_name=body.breed_name or body.breed_id,
        species=body.species,
        image_url=body.image_url,
        use_vision=body.use_vision,
    )


@router.get("/breed-image", response_model=BreedImageResponse)
async def breed_image(
    request: Request,
    breed_id: str | None = Query(None, alias="breedId"),
    breed: str | None = Query(None),
    pet_type: Species | None = Query(None, alias="petType"),
    type_: Species | None = Query(None, alias="type"),
    breed_name: str | None = Query(None, alias="breedName"),
) -> BreedImageResponse:
    # Both the current and the legacy parameter names are accepted.
    breed_token = breed_id or breed
    species = pet_type or type_
    if not breed_token or not species:
        raise HTTPException(status_code=400, detail="Missing breed or type")
    return await facade.resolve_image(
        get_services(request), breed_token, species, name=breed_name or ""
    )


@router.get("/breed-images/{filename}")
async def breed_images(filename: str, request: Request) -> Response:
    shim = get_services(request).shim
    try:
        payload = await shim.serve(filename)
    except InvalidFilenameToken:
        raise HTTPException(status_code=400, detail="Invalid filename")
    except ImageNotFound:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(
        content=payload.data,
        media_type=payload.media_type,
        headers={"Cache-Control": payload.headers["Cache-Control"]},
    )


@router.get("/verify-cache")
async def verification_status(request: Request) -> dict:
    status = await cache_status(get_services(request).store)
    return {
        "summary": {
            "total": status.total,
            "verified": status.verified,
            "unverified": status.unverified,
            "pending": status.pending,
        },
        "images": [row.model_dump(mode="json") for row in status.images],
    }


@router.post("/verify-cache")
async def reverify_cache(request: Request, body: VerifyCacheRequest | None = None) -> dict:
    services = get_services(request)
    report = await verify_cache(
        services.store,
        services.verifier,
        force_recheck=body.force_recheck if body else False,
    )
    return {
        "success": True,
        "summary": report.summary(),
        "results": [r.model_dump(mode="json") for r in report.results],
    }


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> JSONResponse:
    result = await facade.health(get_services(request))
    return JSONResponse(
        content=result.model_dump(mode="json", by_alias=True),
        status_code=503 if result.status == "unhealthy" else 200,
    )


def create_app(
    settings: Settings | None = None,
    services: BreedLensServices | None = None,
) -> FastAPI:
    """Build the FastAPI app. Services are built on startup unless injected."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "services", None) is None:
            app.state.services = facade.build_services(settings)
        logger.info(
            "BreedLens %s ready: providers=%s",
            __version__, ", ".join(app.state.services.registry.names(eligible_only=True)) or "none",
        )
        yield

    app = FastAPI(title="BreedLens", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.include_router(router)
    return app
