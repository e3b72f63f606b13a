from datetime import datetime
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from database.connection import Database, get_database

router = APIRouter()

@router.get("")
def health_check(database: Database = Depends(get_database)):
    """Liveness plus database connectivity."""
    connected = database.ping()
    body = {
        "status": "OK" if connected else "ERROR",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "Connected" if connected else "Disconnected",
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body
    )
