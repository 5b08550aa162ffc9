from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import db as database
from .config import settings
from .errors import InvoiceStoreError
from .routes import api_router
from .schemas import ErrorRead


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    database.init_db()
    yield
    database.engine.dispose()


app = FastAPI(title="bill_server", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > settings.max_body_bytes:
        return JSONResponse(
            status_code=413, content={"error": "Request body too large"}
        )
    return await call_next(request)


@app.exception_handler(InvoiceStoreError)
async def invoice_store_error(_: Request, exc: InvoiceStoreError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content=ErrorRead(error=exc.message).model_dump()
    )


@app.get("/health", tags=["health"])
def health_check() -> dict:
    return {"status": "ok"}
