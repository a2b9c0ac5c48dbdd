import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from traceback import print_exception

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from ..core.errors import BackendConnectionError, FuseError
from ..core.logging import configure_logger
from ..core.settings import settings
from .router import router
from .startup import shutdown_fuse, start_fuse


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await start_fuse()
    try:
        yield
    except asyncio.CancelledError:
        logger.info("Shutdown process interrupted by CancelledError")
    finally:
        await shutdown_fuse()


def create_app() -> FastAPI:
    configure_logger()

    app = FastAPI(
        title="Fuse",
        description="Lightning node API with LNURL-pay support.",
        version=settings.version,
        license_info={
            "name": "MIT License",
        },
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()


def error_content(request: Request, detail: str, code: int) -> dict:
    content = {"detail": detail, "code": code}
    if request.url.path.startswith("/lnurlp"):
        # LUD-06 error shape, understood by wallets
        content.update({"status": "ERROR", "reason": detail})
    return content


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        try:
            err_message = str(e)
        except Exception:
            err_message = e.args[0] if e.args else "Unknown error"

        if isinstance(e, BackendConnectionError):
            logger.error(f"Backend connection error: {err_message}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=error_content(request, err_message, e.code),
            )
        elif isinstance(e, FuseError):
            logger.error(f"FuseError: {err_message}")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=error_content(request, err_message, e.code),
            )
        logger.error(f"Exception: {err_message}")
        if settings.debug:
            print_exception(*sys.exc_info())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_content(request, err_message, 0),
        )


app.include_router(router=router, tags=["Fuse"])
