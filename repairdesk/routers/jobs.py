# repairdesk/routers/jobs.py
from __future__ import annotations
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator

from repairdesk.config import Settings, get_settings
from repairdesk.core.models import JobCardInput, ProductType
from repairdesk.core.registry import JobRegistry, get_registry
from repairdesk.services.receipts import auto_send_message, digits_only, share_link, share_message
from repairdesk.services.search import search_jobs

router = APIRouter(prefix="/jobs", tags=["jobs"])

MIN_PHONE_DIGITS = 10


class JobCreateRequest(BaseModel):
    customerName: str
    phoneNumber: str
    address: str
    productType: ProductType = ProductType.LAPTOP
    model: str
    serialNumber: Optional[str] = None
    problemDescription: str

    @field_validator("customerName", "phoneNumber", "address", "model", "problemDescription")
    @classmethod
    def _required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please fill in all required fields.")
        return v

    @field_validator("phoneNumber")
    @classmethod
    def _phone(cls, v: str) -> str:
        if len(digits_only(v)) < MIN_PHONE_DIGITS:
            raise ValueError("Please enter a valid phone number.")
        return v

    def to_input(self) -> JobCardInput:
        return JobCardInput(
            customer_name=self.customerName,
            phone_number=self.phoneNumber,
            address=self.address,
            product_type=self.productType,
            model=self.model,
            serial_number=(self.serialNumber or "").strip() or None,
            problem_description=self.problemDescription,
        )


def _receipt_opts(settings: Settings) -> dict:
    return {"tz": ZoneInfo(settings.DISPLAY_TZ), "company": settings.COMPANY_NAME}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job(
    req: JobCreateRequest,
    registry: JobRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    job = await registry.create(req.to_input())
    return {"job": job.to_dict(), "shareLink": share_link(job, **_receipt_opts(settings))}


@router.get("")
async def list_jobs(
    q: Optional[str] = Query(default=None, description="Search by ID, name or phone"),
    registry: JobRegistry = Depends(get_registry),
):
    jobs = await registry.list()
    if q:
        jobs = search_jobs(q, jobs)
    return {"count": len(jobs), "jobs": [j.to_dict() for j in jobs]}


@router.get("/{job_id}/receipt")
async def job_receipt(
    job_id: str,
    registry: JobRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    job = await registry.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="job_id not found")

    opts = _receipt_opts(settings)
    return {
        "jobId": job.id,
        "shareMessage": share_message(job, **opts),
        "autoSendMessage": auto_send_message(job, **opts),
        "shareLink": share_link(job, **opts),
    }
