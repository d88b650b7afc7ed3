# repairdesk/services/whatsapp.py
from __future__ import annotations
from datetime import tzinfo
from typing import Any, Dict, Optional, Protocol
import asyncio
import logging

import requests

from repairdesk.core.models import JobCard
from repairdesk.services.receipts import DEFAULT_COMPANY, auto_send_message, digits_only

logger = logging.getLogger("repairdesk.whatsapp")


# ---------- Interface ----------
class Dispatcher(Protocol):
    async def dispatch(self, job: JobCard) -> None: ...


# ---------- WhatsApp Cloud API ----------
class WhatsAppCloudClient:
    """Thin client for the Graph API ``/messages`` endpoint (text messages only)."""

    def __init__(
        self,
        token: str,
        phone_id: str,
        host: str = "graph.facebook.com",
        api_version: str = "v17.0",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.token = (token or "").strip()
        self.phone_id = (phone_id or "").strip()
        if not self.token or not self.phone_id:
            raise RuntimeError("WhatsApp token and phone id are both required")
        self.url = f"https://{host}/{api_version}/{self.phone_id}/messages"
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_text(self, to: str, body: str) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": body},
        }

        r = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        try:
            result = r.json()
        except ValueError:
            result = {"raw": r.text[:200]}

        if not r.ok:
            # Mask the token if the server echoed it back.
            snippet = str(result)[:300].replace(self.token, "***")
            raise RuntimeError(f"WhatsApp API {r.status_code}: {snippet}")
        return result


# ---------- Dispatcher ----------
class ReceiptDispatcher:
    """
    Best-effort auto-send of the full receipt.

    With a client configured the message goes out through the Cloud API in a
    worker thread; without one the message is only logged. ``dispatch`` never
    raises and is meant to be run as a detached task.
    """

    def __init__(
        self,
        client: Optional[WhatsAppCloudClient] = None,
        tz: Optional[tzinfo] = None,
        company: str = DEFAULT_COMPANY,
    ):
        self.client = client
        self.tz = tz
        self.company = company

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def dispatch(self, job: JobCard) -> None:
        body = auto_send_message(job, tz=self.tz, company=self.company)

        if self.client is None:
            logger.info(
                "WhatsApp API keys missing; simulating automatic send job=%s to=%s\n%s",
                job.id, job.phone_number, body,
            )
            return

        to = digits_only(job.phone_number)
        logger.info("Sending automatic WhatsApp receipt job=%s to=%s", job.id, to)
        try:
            result = await asyncio.to_thread(self.client.send_text, to, body)
        except requests.RequestException as e:
            logger.error("WhatsApp network error job=%s: %s", job.id, e)
        except RuntimeError as e:
            logger.error("WhatsApp API error job=%s: %s", job.id, e)
        except Exception:
            logger.exception("WhatsApp dispatch failed job=%s", job.id)
        else:
            logger.info("WhatsApp API success job=%s result=%s", job.id, result)


# ---------- Factory ----------
def build_dispatcher(settings, tz: Optional[tzinfo] = None) -> ReceiptDispatcher:
    client = None
    if settings.whatsapp_configured:
        client = WhatsAppCloudClient(
            settings.WHATSAPP_API_TOKEN,
            settings.WHATSAPP_PHONE_ID,
            host=settings.WHATSAPP_GRAPH_HOST,
            api_version=settings.WHATSAPP_API_VERSION,
            timeout=settings.WHATSAPP_TIMEOUT_SEC,
        )
    return ReceiptDispatcher(client, tz=tz, company=settings.COMPANY_NAME)
