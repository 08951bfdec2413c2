# main.py
import logging
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color, ErrorMessage
from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from controller.controller_dependencies import get_corpus_repository
from fastapi.responses import JSONResponse
from model.api import ErrorResponse
from util.errors import FactCheckError
from util.logger import init_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    store = get_corpus_repository()
    logger.info(
        "app.start env=%s backend=%s data_dir=%s corpora=%s default_version=%s",
        settings.APP_ENV,
        settings.EMBEDDING_BACKEND.value,
        store.data_dir,
        ",".join(store.list_versions()) or "-",
        settings.DEFAULT_SPEC_VERSION,
    )
    print(f"{Color.BLUE}Server Started{Color.RESET}")
    try:
        yield
    finally:
        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,  # Allow cookies and other credentials
    allow_methods=["GET", "POST"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept"],  # Allowed HTTP Headers
)


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.exception_handler(FactCheckError)
async def factcheck_error_handler(request: Request, exc: FactCheckError):
    code = ErrorMessage.status_for(exc.kind)
    log = logger.error if code >= 500 else logger.warning
    log("request.failed path=%s kind=%s status=%d", request.url.path, exc.kind, code)
    body = ErrorResponse(error=exc.kind, message=exc.message)
    return JSONResponse(status_code=code, content=body.model_dump())


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
