# repairdesk/routers/health.py
from fastapi import APIRouter, Depends
from pathlib import Path

from repairdesk import __version__
from repairdesk.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "version": __version__,
        "port": settings.PORT,
        "dataDir": str(Path(settings.DATA_DIR).resolve()),
        "allowedOrigins": settings.ALLOWED_ORIGINS,
        "jobIdPrefix": settings.JOB_ID_PREFIX,
        "displayTz": settings.DISPLAY_TZ,
        # no secrets, only whether auto-send is wired up
        "whatsapp": {
            "autoSend": settings.whatsapp_configured,
            "apiVersion": settings.WHATSAPP_API_VERSION,
        },
    }
