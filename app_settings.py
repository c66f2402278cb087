import configparser
import os
from dataclasses import dataclass


DEFAULT_API_BASE_URL = "http://localhost:5000/api"


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FeatureFlags:
    use_remote_students: bool
    use_demo_seed: bool
    use_demo_login: bool


@dataclass(frozen=True)
class AppSettings:
    config: configparser.ConfigParser
    feature_flags: FeatureFlags
    api_base_url: str
    api_timeout_seconds: int
    storage_backend: str
    storage_path: str
    key_prefix: str
    demo_agency_id: str


def load_feature_flags():
    return FeatureFlags(
        use_remote_students=_env_bool("USE_REMOTE_STUDENTS", default=True),
        use_demo_seed=_env_bool("USE_DEMO_SEED", default=True),
        use_demo_login=_env_bool("USE_DEMO_LOGIN", default=True),
    )


def load_app_settings(config_path=None):
    config_path = config_path or os.getenv("SAG_CONFIG_PATH", "config.ini")
    parser = configparser.ConfigParser()
    parser.read(config_path)

    if "Storage" not in parser:
        raise RuntimeError(
            f"Missing required sections in config file: {config_path}. "
            "Expected [Storage]."
        )

    api_base_url = (
        os.getenv("SAG_API_URL", "").strip()
        or parser.get("Api", "base_url", fallback=DEFAULT_API_BASE_URL)
    )
    storage_path = parser.get("Storage", "path", fallback="data/local_cache.json")
    if not os.path.isabs(storage_path):
        storage_path = os.path.join(os.path.dirname(os.path.abspath(config_path)), storage_path)

    return AppSettings(
        config=parser,
        feature_flags=load_feature_flags(),
        api_base_url=api_base_url.rstrip("/"),
        api_timeout_seconds=parser.getint("Api", "timeout_seconds", fallback=20),
        storage_backend=parser.get("Storage", "backend", fallback="json").strip().lower(),
        storage_path=storage_path,
        key_prefix=parser.get("Storage", "key_prefix", fallback="sag").strip() or "sag",
        demo_agency_id=parser.get("Demo", "agency_id", fallback="mock-agency-id").strip(),
    )
