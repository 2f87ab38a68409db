import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from conduit.config import settings
from conduit.exceptions import NotFoundError, ViewerRequiredError
from conduit.middleware import TimingMiddleware
from conduit.routers import articles, metrics, profiles, tags, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Conduit API",
    description="Articles, comments, tags, favorites and a follow graph for a blogging platform",
    version="1.0.0",
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(articles.router)
app.include_router(profiles.router)
app.include_router(tags.router)
app.include_router(users.router)
app.include_router(metrics.router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info("404 on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": f"{exc.entity} not found"})


@app.exception_handler(ViewerRequiredError)
async def viewer_required_handler(request: Request, exc: ViewerRequiredError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0", "env": settings.APP_ENV}
