import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers import health as health_router, moon
from .settings import settings


logger = logging.getLogger(__name__)

def custom_generate_unique_id(route):
    # method + path is always unique
    return f"{list(route.methods)[0].lower()}_{route.path.replace('/', '_').strip('_')}"

app = FastAPI(
    title="Moon Calendar",
    version="0.1.0",
    generate_unique_id_function=custom_generate_unique_id
)

@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception):
    logger.exception("[API] unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"ok": False, "data": None, "error": str(exc)})

@app.on_event("startup")
async def _log_startup():
    logger.info("[API] default tz=%s cache bound=%s", settings.MOON_DEFAULT_TZ, settings.MOON_CACHE_MAX_MONTHS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router.router)
app.include_router(moon.router)
