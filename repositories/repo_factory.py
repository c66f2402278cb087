import logging

from api_client import CrmApiClient
from repositories.agency_store import AgencyStore
from repositories.key_value_cache import JsonFileCache, SqliteCache
from seed_data import make_demo_seed_policy, no_seed_policy

logger = logging.getLogger(__name__)


def build_key_value_cache(backend="json", path="data/local_cache.json"):
    if backend == "sqlite":
        logger.info("[CONFIG] Using SQLite local cache at %s", path)
        return SqliteCache(path)
    if backend != "json":
        logger.warning("[CONFIG] Unknown storage backend %r. Falling back to JSON file cache.", backend)
    return JsonFileCache(path)


def build_api_client(settings):
    return CrmApiClient(
        base_url=settings.api_base_url,
        timeout_seconds=settings.api_timeout_seconds,
    )


def build_agency_store(settings, cache=None, api_client=None):
    """Build the agency store for current runtime flags."""
    cache = cache or build_key_value_cache(settings.storage_backend, settings.storage_path)
    flags = settings.feature_flags

    if flags.use_remote_students:
        api_client = api_client or build_api_client(settings)
        logger.info("[CONFIG] Students read from %s with local fallback.", settings.api_base_url)
    else:
        api_client = None
        logger.info("[CONFIG] Remote student reads disabled; local cache only.")

    seed_policy = make_demo_seed_policy(settings.demo_agency_id) if flags.use_demo_seed else no_seed_policy
    return AgencyStore(
        cache=cache,
        api_client=api_client,
        seed_policy=seed_policy,
        key_prefix=settings.key_prefix,
    )
