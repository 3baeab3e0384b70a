"""HTTP module - Conditional request handler and app wiring."""

from etagcache_core.http.handler import (
    Handler,
    DEFAULT_CHECK_HEADER,
    DEFAULT_ETAG_HEADER,
)
from etagcache_core.http.app import (
    create_app,
    create_router,
    path_key,
)

__all__ = [
    "Handler",
    "DEFAULT_CHECK_HEADER",
    "DEFAULT_ETAG_HEADER",
    "create_app",
    "create_router",
    "path_key",
]
