import json
import logging
from copy import deepcopy

from api_client import RemoteUnavailableError
from seed_data import no_seed_policy
from student_mapper import Country, project_api_student

logger = logging.getLogger(__name__)

COLLECTIONS = ("students", "partners", "invoices", "expenses", "tasks", "claims")

DEFAULT_SETTINGS = {
    "agencyName": "StudyAbroad Genius",
    "email": "info@studyabroadgenius.com",
    "phone": "",
    "address": "",
    "defaultCountry": Country.AUSTRALIA,
    "currency": "NPR",
    "notifications": {"emailOnVisa": True, "dailyReminders": True},
    "subscription": {"plan": "Free"},
}


def default_settings():
    return deepcopy(DEFAULT_SETTINGS)


def _check_collection(collection):
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


class AgencyStore:
    """
    Agency-scoped collections over a local key-value cache.
    - Students are read from the CRM API first and fall back to the cache.
    - Every other collection, settings, and all writes use the cache only.

    Student writes never reach the API even though reads prefer it; pushing
    changes upstream is left to callers of CrmApiClient.
    """

    def __init__(self, cache, api_client=None, seed_policy=None, key_prefix="sag"):
        self.cache = cache
        self.api_client = api_client
        self.seed_policy = seed_policy or no_seed_policy
        self.key_prefix = key_prefix

    def collection_key(self, collection, agency_id):
        return f"{self.key_prefix}_{collection}_{agency_id}"

    def settings_key(self, agency_id):
        return f"{self.key_prefix}_settings_{agency_id}"

    def _read_json(self, key):
        raw = self.cache.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("[STORE] Corrupted payload under key=%s treated as missing: %s", key, exc)
            return None

    def _fetch_local(self, collection, agency_id):
        stored = self._read_json(self.collection_key(collection, agency_id))
        if stored is None:
            seed = self.seed_policy(agency_id, collection)
            return seed if seed is not None else []
        if not isinstance(stored, list):
            logger.warning(
                "[STORE] Expected a list under key=%s, got %s",
                self.collection_key(collection, agency_id),
                type(stored).__name__,
            )
            return []
        return stored

    def _fetch_remote_students(self):
        payload = self.api_client.get_students()
        if not isinstance(payload, list):
            raise RemoteUnavailableError("Malformed /students payload: expected a list")
        try:
            return [project_api_student(item) for item in payload]
        except ValueError as exc:
            raise RemoteUnavailableError(f"Malformed student record: {exc}") from exc

    def fetch(self, ctx, collection):
        _check_collection(collection)
        agency_id = ctx.agency_id
        if not agency_id:
            return []

        if collection == "students" and self.api_client is not None:
            try:
                return self._fetch_remote_students()
            except RemoteUnavailableError as exc:
                logger.info("[FALLBACK] Falling back to local cache for students: %s", exc)

        return self._fetch_local(collection, agency_id)

    def save(self, ctx, collection, items):
        _check_collection(collection)
        if not isinstance(items, list):
            raise ValueError(f"{collection} must be saved as a list, got {type(items).__name__}")
        agency_id = ctx.require_agency_id()
        self.cache.set_item(self.collection_key(collection, agency_id), json.dumps(items))

    def fetch_settings(self, ctx):
        agency_id = ctx.agency_id
        if not agency_id:
            return {}
        stored = self._read_json(self.settings_key(agency_id))
        if isinstance(stored, dict):
            return stored
        if stored is not None:
            logger.warning("[STORE] Settings for agency=%s are not an object; using defaults", agency_id)
        return default_settings()

    def save_settings(self, ctx, settings):
        agency_id = ctx.require_agency_id()
        self.cache.set_item(self.settings_key(agency_id), json.dumps(dict(settings)))

    def clear(self, ctx):
        agency_id = ctx.agency_id
        if not agency_id:
            return
        for collection in COLLECTIONS:
            self.cache.remove_item(self.collection_key(collection, agency_id))
        self.cache.remove_item(self.settings_key(agency_id))
        logger.info("[STORE] Local data cleared for agency=%s", agency_id)
