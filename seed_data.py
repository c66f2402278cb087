from copy import deepcopy

from student_mapper import ApplicationStatus, Country, NocStatus

DEMO_AGENCY_ID = "mock-agency-id"

MOCK_STUDENTS_INITIAL = [
    {
        "id": "demo-student-1",
        "name": "Aarav Sharma",
        "email": "aarav.sharma@example.com",
        "phone": "+977-9800000001",
        "targetCountry": Country.AUSTRALIA,
        "status": ApplicationStatus.APPLIED,
        "nocStatus": NocStatus.NOT_APPLIED,
        "documents": {},
        "notes": "IELTS 7.0, looking at Master of IT intakes.",
        "createdAt": 1704067200000,
    },
    {
        "id": "demo-student-2",
        "name": "Sita Karki",
        "email": "sita.karki@example.com",
        "phone": "+977-9800000002",
        "targetCountry": Country.USA,
        "status": ApplicationStatus.LEAD,
        "nocStatus": NocStatus.NOT_APPLIED,
        "documents": {},
        "notes": "",
        "createdAt": 1706745600000,
    },
]

MOCK_PARTNERS_INITIAL = [
    {
        "id": "demo-partner-1",
        "name": "University of Sydney",
        "country": Country.AUSTRALIA,
        "type": "University",
        "commissionRate": 15,
    },
    {
        "id": "demo-partner-2",
        "name": "Arizona State University",
        "country": Country.USA,
        "type": "University",
        "commissionRate": 10,
    },
]

_DEMO_SEEDS = {
    "students": MOCK_STUDENTS_INITIAL,
    "partners": MOCK_PARTNERS_INITIAL,
}


def no_seed_policy(agency_id, collection):
    return None


def make_demo_seed_policy(demo_agency_id=DEMO_AGENCY_ID):
    """Seed students/partners for the demo tenant only; other tenants start empty."""

    def policy(agency_id, collection):
        if agency_id != demo_agency_id:
            return None
        seed = _DEMO_SEEDS.get(collection)
        return deepcopy(seed) if seed is not None else None

    return policy
