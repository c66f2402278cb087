import json
import logging
import time

from werkzeug.security import check_password_hash, generate_password_hash

from api_client import RemoteUnavailableError
from repositories.agency_store import default_settings
from seed_data import DEMO_AGENCY_ID
from tenancy import TenantContext

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "sag_current_user"
AUTH_TOKEN_KEY = "authToken"
LOCAL_USERS_KEY = "sag_users"

DEMO_ADMIN_EMAIL = "admin@demo.com"
DEMO_ADMIN_PASSWORD = "password"
BACKEND_DEFAULT_ADMIN_EMAIL = "admin@studyabroad.com"
BACKEND_DEFAULT_ADMIN_PASSWORD = "admin123"

MOCK_ADMIN = {
    "id": "mock-admin-id",
    "name": "Demo Admin",
    "email": DEMO_ADMIN_EMAIL,
    "role": "Owner",
    "agencyId": DEMO_AGENCY_ID,
}


class InvalidCredentialsError(RuntimeError):
    def __init__(self, message="Invalid credentials"):
        super().__init__(message)


def _public_user(user):
    return {k: v for k, v in user.items() if k != "passwordHash"}


class SessionManager:
    """Signed-in principal, persisted in the same local cache as agency data."""

    def __init__(self, cache, store, api_client=None, allow_demo_login=True):
        self.cache = cache
        self.store = store
        self.api_client = api_client
        self.allow_demo_login = allow_demo_login
        token = self.cache.get_item(AUTH_TOKEN_KEY)
        if token and self.api_client is not None:
            self.api_client.set_token(token)

    def _load_json(self, key, default):
        raw = self.cache.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("[SESSION] Ignoring unreadable entry under key=%s", key)
            return default

    def _set_current_user(self, user):
        self.cache.set_item(CURRENT_USER_KEY, json.dumps(user))
        return user

    def _remember_token(self):
        if self.api_client is not None and self.api_client.token:
            self.cache.set_item(AUTH_TOKEN_KEY, self.api_client.token)

    def _local_users(self):
        users = self._load_json(LOCAL_USERS_KEY, [])
        return users if isinstance(users, list) else []

    def current_user(self):
        user = self._load_json(CURRENT_USER_KEY, None)
        return user if isinstance(user, dict) else None

    def context(self):
        return TenantContext(principal=self.current_user())

    def login(self, email, password):
        if self.api_client is not None:
            try:
                response = self.api_client.login(email, password)
                if isinstance(response, dict) and response.get("user"):
                    self._remember_token()
                    logger.info("[SESSION] Signed in %s via API", email)
                    return self._set_current_user(response["user"])
                raise InvalidCredentialsError()
            except RemoteUnavailableError as exc:
                logger.error("[SESSION] Backend login failed: %s", exc)
                # The backend's own default admin has no local fallback.
                if email == BACKEND_DEFAULT_ADMIN_EMAIL and password == BACKEND_DEFAULT_ADMIN_PASSWORD:
                    raise

        if self.allow_demo_login and email == DEMO_ADMIN_EMAIL and password == DEMO_ADMIN_PASSWORD:
            logger.info("[SESSION] Signed in demo admin")
            return self._set_current_user(dict(MOCK_ADMIN))

        for user in self._local_users():
            if user.get("email") == email and check_password_hash(user.get("passwordHash", ""), password):
                logger.info("[SESSION] Signed in %s from local accounts", email)
                return self._set_current_user(_public_user(user))

        raise InvalidCredentialsError()

    def register_agency(self, name, email, agency_name, password=None):
        password = password or "password123"
        if self.api_client is not None:
            try:
                response = self.api_client.register({
                    "name": name,
                    "email": email,
                    "password": password,
                    "phone": "",
                })
                if isinstance(response, dict) and response.get("user"):
                    self._remember_token()
                    user = self._set_current_user(response["user"])
                    settings = default_settings()
                    settings["agencyName"] = agency_name
                    settings["email"] = email
                    self.store.save_settings(TenantContext(principal=user), settings)
                    return user
            except RemoteUnavailableError as exc:
                logger.error("[SESSION] Backend registration failed: %s", exc)

        new_id = str(int(time.time() * 1000))
        user = {
            "id": new_id,
            "name": name,
            "email": email,
            "role": "Owner",
            "agencyId": f"agency_{new_id}",
        }
        users = self._local_users()
        users.append({**user, "passwordHash": generate_password_hash(password)})
        self.cache.set_item(LOCAL_USERS_KEY, json.dumps(users))
        logger.info("[SESSION] Registered local agency account %s", email)
        return self._set_current_user(user)

    def restore_session(self):
        """Return the persisted user, asking the API when only a token survives."""
        user = self.current_user()
        if user or self.api_client is None or not self.api_client.token:
            return user
        try:
            response = self.api_client.get_current_user()
        except RemoteUnavailableError as exc:
            logger.info("[SESSION] Could not restore session: %s", exc)
            return None
        if isinstance(response, dict) and response.get("user"):
            return self._set_current_user(response["user"])
        return None

    def logout(self):
        self.cache.remove_item(CURRENT_USER_KEY)
        self.cache.remove_item(AUTH_TOKEN_KEY)
        if self.api_client is not None:
            self.api_client.clear_token()
