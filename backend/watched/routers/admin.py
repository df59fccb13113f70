"""Admin-only audit endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from watched.core.deps import require_admin
from watched.core.rate_limit import rate_limit
from watched.db.session import get_db
from watched.schemas.admin import AdminLogOut, SiteActivityOut
from watched.services.audit import list_admin_logs, list_site_activity

router = APIRouter(dependencies=[Depends(rate_limit()), Depends(require_admin)])


@router.get("/logs", response_model=list[AdminLogOut])
def get_admin_logs(db: Session = Depends(get_db)) -> list[AdminLogOut]:
    return list_admin_logs(db)


@router.get("/site-activity", response_model=list[SiteActivityOut])
def get_site_activity(
    filter: str = Query(default="all", description="all|past-month|past-2-weeks"),
    db: Session = Depends(get_db),
) -> list[SiteActivityOut]:
    return list_site_activity(db, filter)
