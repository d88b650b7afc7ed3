# repairdesk/services/receipts.py
from __future__ import annotations

import re
from datetime import tzinfo
from typing import Optional
from urllib.parse import quote

from repairdesk.core.models import JobCard

DEFAULT_COMPANY = "SRI SAI TECHNOLOGIES"
SHARE_HOST = "wa.me"

# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

_NON_DIGITS = re.compile(r"[^0-9]")


def digits_only(phone: str) -> str:
    return _NON_DIGITS.sub("", phone or "")


def _local(job: JobCard, tz: Optional[tzinfo]):
    return job.created_at.astimezone(tz) if tz is not None else job.created_at


def share_message(job: JobCard, tz: Optional[tzinfo] = None, company: str = DEFAULT_COMPANY) -> str:
    """Short receipt for the customer-facing wa.me link."""
    date = _local(job, tz).strftime("%d/%m/%Y")
    lines = [
        f"🧾 *Your receipt from {company.title()}*",
        "",
        "Thank you for visiting us! Here is your service receipt:",
        "",
        f"🆔 *Job ID:* {job.id}",
        f"📅 *Date:* {date}",
        "",
        f"👤 *Name:* {job.customer_name}",
        f"🖥️ *Device:* {job.device_summary}",
        f"🛠️ *Issue:* {job.problem_description}",
        "",
        "We will notify you once the repair is done. Thank you for your patience! ✨",
        "",
        f"*{company}*",
    ]
    return "\n".join(lines)


def auto_send_message(job: JobCard, tz: Optional[tzinfo] = None, company: str = DEFAULT_COMPANY) -> str:
    """Full receipt sent through the Cloud API (plain text, not URL-encoded)."""
    stamp = _local(job, tz).strftime("%d/%m/%Y, %I:%M:%S %p")
    rule = "-" * 32
    lines = [
        f"🧾 *Your receipt from {company.title()}*",
        "",
        "✨ Thank you for choosing us! We truly appreciate your trust.",
        "",
        "*Job Details*",
        rule,
        f"🆔 *Job ID:* {job.id}",
        f"📅 *Date:* {stamp}",
        "",
        "👤 *Customer Details:*",
        f"Name: {job.customer_name}",
        f"Phone: {job.phone_number}",
        f"Address: {job.address}",
        "",
        "🖥️ *Product Details:*",
        f"Product: {job.product_type.value}",
        f"Model: {job.model}",
        f"Serial No: {job.serial_number or 'N/A'}",
        "",
        "🛠️ *Issue Reported:*",
        job.problem_description,
        rule,
        "",
        "👷 Our expert technicians will take the utmost care of your device. "
        "We will update you as soon as the service is completed.",
        "",
        "📞 For any queries, feel free to contact us.",
        "",
        "Have a wonderful day! 🌟",
        f"*{company}*",
    ]
    return "\n".join(lines)


def share_link(job: JobCard, tz: Optional[tzinfo] = None, company: str = DEFAULT_COMPANY) -> str:
    text = quote(share_message(job, tz=tz, company=company), safe=_URI_COMPONENT_SAFE)
    return f"https://{SHARE_HOST}/{digits_only(job.phone_number)}?text={text}"
