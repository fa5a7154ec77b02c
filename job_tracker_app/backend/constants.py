"""
Fixed vocabularies shared by validation, persistence and templates.
"""
from typing import Dict, List

# Pipeline order. No transition rules are enforced between these values.
APPLICATION_STATUSES: List[str] = [
    "applied",
    "interview_scheduled",
    "interview_completed",
    "offer_received",
    "rejected",
]

DEFAULT_STATUS = "applied"

STATUS_LABELS: Dict[str, str] = {
    "applied": "Applied",
    "interview_scheduled": "Interview Scheduled",
    "interview_completed": "Interview Completed",
    "offer_received": "Offer Received",
    "rejected": "Rejected",
}

# CSS class suffix for status badges, e.g. "gray" -> .badge--gray
STATUS_COLORS: Dict[str, str] = {
    "applied": "gray",
    "interview_scheduled": "blue",
    "interview_completed": "purple",
    "offer_received": "green",
    "rejected": "red",
}

WORK_TYPES: List[str] = ["remote", "hybrid", "on_site"]

WORK_TYPE_LABELS: Dict[str, str] = {
    "remote": "Remote",
    "hybrid": "Hybrid",
    "on_site": "On Site",
}

APPLICATION_FIELDS: List[str] = [
    "company_name",
    "position_title",
    "job_posting_url",
    "location",
    "work_type",
    "salary_range_min",
    "salary_range_max",
    "status",
    "date_applied",
    "section_id",
]


class Routes:
    """Page paths. Use these instead of raw strings in links and redirects."""

    HOME = "/"
    LOGIN = "/login"
    SIGNUP = "/signup"
    LOGOUT = "/logout"
    APPLICATIONS = "/applications"
    APPLICATION_NEW = "/applications/new"
    SECTIONS = "/sections"

    @staticmethod
    def application_detail(application_id: str) -> str:
        return f"/applications/{application_id}"

    @staticmethod
    def application_edit(application_id: str) -> str:
        return f"/applications/{application_id}/edit"
