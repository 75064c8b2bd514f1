"""Liveness endpoint for Docker health checks and load balancers."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

router = APIRouter()


# Hey future me - NOT wrapped in the {success, data} envelope and no auth. Probes only look at
# the 200, and the old front end greps status == "OK". Don't add backend checks here: a sheet
# outage must not get the container restarted.
@router.get("")
async def health() -> dict[str, Any]:
    """Report that the process is up."""
    return {
        "status": "OK",
        "message": "Disco API is running",
        "timestamp": datetime.now(UTC).isoformat(),
    }
