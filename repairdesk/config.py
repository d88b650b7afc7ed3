# repairdesk/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]

# Load in ascending precedence; later overrides earlier
load_dotenv(ROOT / ".env")
load_dotenv(ROOT / ".env.local", override=True)
load_dotenv(ROOT / "repairdesk" / ".env", override=True)
load_dotenv(ROOT / "repairdesk" / ".env.local", override=True)


def _optional_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else None


class Settings:
    def __init__(self) -> None:
        # Server
        self.PORT: int = int(os.getenv("PORT", "8000"))
        self.DATA_DIR: str = os.getenv("DATA_DIR", str(ROOT / "data"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # CORS
        self.ALLOWED_ORIGINS: list[str] = [
            s.strip() for s in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",") if s.strip()
        ]

        # Shop / job cards
        self.COMPANY_NAME: str = os.getenv("COMPANY_NAME", "SRI SAI TECHNOLOGIES")
        self.JOB_ID_PREFIX: str = os.getenv("JOB_ID_PREFIX", "SST")
        self.LIST_DELAY_MS: int = int(os.getenv("LIST_DELAY_MS", "0"))
        self.DISPLAY_TZ: str = os.getenv("DISPLAY_TZ", "Asia/Kolkata")

        # WhatsApp Cloud API (auto-send is off unless both are set)
        self.WHATSAPP_API_TOKEN: str = (os.getenv("WHATSAPP_API_TOKEN") or "").strip()
        self.WHATSAPP_PHONE_ID: str = (os.getenv("WHATSAPP_PHONE_ID") or "").strip()
        self.WHATSAPP_GRAPH_HOST: str = os.getenv("WHATSAPP_GRAPH_HOST", "graph.facebook.com")
        self.WHATSAPP_API_VERSION: str = os.getenv("WHATSAPP_API_VERSION", "v17.0")
        self.WHATSAPP_TIMEOUT_SEC: Optional[float] = _optional_float("WHATSAPP_TIMEOUT_SEC")

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.WHATSAPP_API_TOKEN and self.WHATSAPP_PHONE_ID)


@lru_cache
def get_settings() -> Settings:
    return Settings()
