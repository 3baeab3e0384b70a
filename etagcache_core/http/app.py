"""EtagCache App - FastAPI Application Wiring.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, FastAPI
from starlette.requests import Request

from etagcache_core.http.handler import Handler, KeyFunc

logger = logging.getLogger(__name__)

DEFAULT_PATH = "/cache/{key:path}"


def path_key(request: Request) -> str:
    """Default key function: the "key" path parameter."""
    return request.path_params["key"]


def create_router(
    cache: Any,
    path: str = DEFAULT_PATH,
    key_func: Optional[KeyFunc] = None,
    **options: Any,
) -> APIRouter:
    """Build a router exposing the cache.

    HEAD maps to head, GET to restore, PUT and POST to save, DELETE to
    remove.

    Args:
        cache: Cache or CacheSet
        path: Route path
        key_func: Maps a request to a key, defaults to the path parameter
        **options: Passed to Handler

    Returns:
        APIRouter
    """
    handler = Handler(cache, key_func=key_func or path_key, **options)
    router = APIRouter()

    # HEAD first: a GET route would otherwise answer HEAD requests
    router.add_route(path, handler.head, methods=["HEAD"], include_in_schema=False)
    router.add_route(path, handler.restore, methods=["GET"], include_in_schema=False)
    router.add_route(path, handler.save, methods=["PUT", "POST"], include_in_schema=False)
    router.add_route(path, handler.remove, methods=["DELETE"], include_in_schema=False)

    return router


def create_app(
    cache: Any,
    path: str = DEFAULT_PATH,
    key_func: Optional[KeyFunc] = None,
    title: str = "EtagCache",
    **options: Any,
) -> FastAPI:
    """Build a standalone application serving the cache.

    The cache is closed on application shutdown.

    Args:
        cache: Cache or CacheSet
        path: Route path
        key_func: Maps a request to a key
        title: Application title
        **options: Passed to Handler

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Serving {cache!r} on {path}")
        yield
        close = getattr(cache, "close", None)
        if close is not None:
            await close()

    app = FastAPI(title=title, lifespan=lifespan)
    app.include_router(create_router(cache, path, key_func, **options))
    return app


__all__ = ["create_app", "create_router", "path_key", "DEFAULT_PATH"]
