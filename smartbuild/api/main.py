from __future__ import annotations

from fastapi import FastAPI

from smartbuild import __version__
from smartbuild.api.endpoints import health
from smartbuild.api.endpoints import metrics as metrics_ep
from smartbuild.api.endpoints.builds import router as builds_router
from smartbuild.api.endpoints.targets import router as targets_router
from smartbuild.api.middleware.error_shaping import SafeErrorMiddleware
from smartbuild.api.middleware.request_context import RequestContextMiddleware

app = FastAPI(
    title="smartbuild API",
    version=__version__,
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call = OUTERMOST wrapper.
#   SafeErrorMiddleware -> RequestContext -> handler
# ------------------------------------------------------------
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SafeErrorMiddleware)


app.include_router(builds_router)
app.include_router(targets_router)
app.include_router(health.router)
app.include_router(metrics_ep.router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}
