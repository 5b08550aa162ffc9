from fastapi import APIRouter

from .exports import router as exports_router
from .invoices import router as invoices_router

api_router = APIRouter(prefix="/api")
api_router.include_router(invoices_router, tags=["invoices"])
api_router.include_router(exports_router, tags=["exports"])
