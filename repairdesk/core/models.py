# repairdesk/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ProductType(str, Enum):
    LAPTOP = "Laptop"
    PRINTER = "Printer"
    CPU = "CPU/Desktop"
    REFILLS = "Toner/Cartridge Refill"
    OTHER = "Other"


class JobStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DELIVERED = "DELIVERED"


# snake_case attribute -> camelCase key used on disk and over the API
_WIRE_KEYS = {
    "id": "id",
    "created_at": "createdAt",
    "customer_name": "customerName",
    "phone_number": "phoneNumber",
    "address": "address",
    "product_type": "productType",
    "model": "model",
    "serial_number": "serialNumber",
    "problem_description": "problemDescription",
    "status": "status",
}


@dataclass
class JobCardInput:
    """Everything the caller supplies for a new job card."""
    customer_name: str
    phone_number: str
    address: str
    product_type: ProductType
    model: str
    problem_description: str
    serial_number: Optional[str] = None


@dataclass
class JobCard:
    id: str
    customer_name: str
    phone_number: str
    address: str
    product_type: ProductType
    model: str
    problem_description: str
    serial_number: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_input(cls, job_id: str, data: JobCardInput, created_at: datetime) -> "JobCard":
        fields = asdict(data)
        fields["serial_number"] = (fields["serial_number"] or "").strip() or None
        return cls(id=job_id, created_at=created_at, status=JobStatus.PENDING, **fields)

    @property
    def device_summary(self) -> str:
        return f"{self.product_type.value} - {self.model}"

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["product_type"] = self.product_type.value
        d["status"] = self.status.value
        d["created_at"] = self.created_at.isoformat()
        if not d["serial_number"]:
            d.pop("serial_number")
        return {_WIRE_KEYS[k]: v for k, v in d.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobCard":
        """Inverse of ``to_dict``. Raises KeyError/ValueError on malformed records."""
        created_at = datetime.fromisoformat(str(data["createdAt"]).replace("Z", "+00:00"))
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            created_at=created_at,
            customer_name=data["customerName"],
            phone_number=data["phoneNumber"],
            address=data["address"],
            product_type=ProductType(data["productType"]),
            model=data["model"],
            serial_number=data.get("serialNumber") or None,
            problem_description=data["problemDescription"],
            status=JobStatus(data.get("status", JobStatus.PENDING.value)),
        )
