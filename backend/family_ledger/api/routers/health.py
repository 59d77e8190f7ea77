from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_db, get_optional_user
from family_ledger.models.user import User

router = APIRouter(tags=["health"])


@router.get("/health")
def health(
    request: Request,
    db: Session = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
) -> dict:
    return {
        "success": True,
        "status": "OK",
        "message": "Server is running",
        "database": db.get_bind().dialect.name,
        "protocol": request.url.scheme,
        "secure": request.url.scheme == "https",
        "authenticated": caller is not None,
    }
