from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shortlinks.db import database
from shortlinks.services.cache import RedirectCache, get_cache

router = APIRouter(tags=["health"])

# simple liveness
@router.get("/health")
def health():
    return {"status": "ok"}

# readiness: check DB and, when configured, the redirect cache
@router.get("/ready")
def readiness(
    db: Session = Depends(database.get_db),
    cache: Optional[RedirectCache] = Depends(get_cache),
):
    details = {"db": "ok" if database.verify_database_connection(db) else "error"}
    if cache is not None:
        details["redis"] = "ok" if cache.ping() else "error"

    ready = all(v == "ok" for v in details.values())
    return {"ready": ready, "details": details}
