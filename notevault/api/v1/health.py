"""Health check endpoint with credential-store connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from notevault.core.database import check_db_connected, get_db
from notevault.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> HealthResponse:
    """Used by load balancers and monitoring; never requires a token."""
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        environment=request.app.state.settings.APP_ENV,
        database=db_status,
    )
