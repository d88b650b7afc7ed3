# repairdesk/services/search.py
from __future__ import annotations
from typing import Iterable, List

from repairdesk.core.models import JobCard


def search_jobs(term: str, jobs: Iterable[JobCard]) -> List[JobCard]:
    """
    Filter by job id, customer name (both case-insensitive) or phone substring.
    An empty term matches everything; input order is kept.
    """
    lower = (term or "").lower()
    return [
        job for job in jobs
        if lower in job.id.lower()
        or lower in job.customer_name.lower()
        or lower in job.phone_number
    ]
