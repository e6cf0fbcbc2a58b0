from datetime import datetime, timezone
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health-check")
def health_check():
    return {
        "success": True,
        "message": "Hello World!",
        "date": datetime.now(timezone.utc).strftime("%a %b %d %Y"),
    }
