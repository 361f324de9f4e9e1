from typing import Any, Dict, Optional

from fastapi import HTTPException, status


def application_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Application not found",
    )


def require_found(record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if record is None:
        raise application_not_found()
    return record
