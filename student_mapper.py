# student_mapper.py - server-shaped student record -> client-shaped record

from collections.abc import Mapping
from datetime import datetime, timezone


class ApplicationStatus:
    LEAD = "Lead"
    APPLIED = "Applied"
    OFFER_RECEIVED = "Offer Received"
    VISA_REJECTED = "Visa Rejected"


class NocStatus:
    NOT_APPLIED = "Not Applied"


class Country:
    USA = "USA"
    AUSTRALIA = "Australia"


API_STATUS_MAP = {
    "Lead": ApplicationStatus.LEAD,
    "Applied": ApplicationStatus.APPLIED,
    "Enrolled": ApplicationStatus.OFFER_RECEIVED,
    "Rejected": ApplicationStatus.VISA_REJECTED,
}


def map_api_status(api_status):
    """Server statuses without a client counterpart (Prospect, On Hold, ...) become Lead."""
    return API_STATUS_MAP.get(api_status, ApplicationStatus.LEAD)


def _created_at_millis(value):
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return int(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def project_api_student(record):
    if not isinstance(record, Mapping):
        raise ValueError(f"Student record must be an object, got {type(record).__name__}")

    preferred = record.get("preferredCountries") or []
    target_country = preferred[0] if isinstance(preferred, list) and preferred else Country.USA

    return {
        "id": record.get("id"),
        "name": f"{record.get('firstName')} {record.get('lastName')}",
        "email": record.get("email"),
        "phone": record.get("phone"),
        "targetCountry": target_country,
        "status": map_api_status(record.get("status")),
        "nocStatus": NocStatus.NOT_APPLIED,
        "documents": {},
        "notes": record.get("notes") or "",
        "createdAt": _created_at_millis(record.get("createdAt")),
        "nationality": record.get("nationality"),
        "dateOfBirth": record.get("dateOfBirth"),
        "address": record.get("address"),
        "educationLevel": record.get("educationLevel"),
        "englishProficiency": record.get("englishProficiency"),
        "budget": record.get("budget"),
    }
