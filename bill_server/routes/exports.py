from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import exports as exports_service

router = APIRouter(prefix="/export")


def _download(db: Session, fmt: str) -> Response:
    export = exports_service.build_export(db, fmt)
    return Response(
        content=export.content,
        media_type=export.format.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/json")
def export_json(db: Session = Depends(get_db)) -> Response:
    return _download(db, "json")


@router.get("/csv")
def export_csv(db: Session = Depends(get_db)) -> Response:
    return _download(db, "csv")
