import logging

import requests

from app_settings import DEFAULT_API_BASE_URL

logger = logging.getLogger(__name__)


class RemoteUnavailableError(RuntimeError):
    """Network, HTTP or payload failure talking to the CRM API."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class CrmApiClient:
    """REST client for the CRM backend (auth, students, users, activities)."""

    def __init__(self, base_url=DEFAULT_API_BASE_URL, token=None, timeout_seconds=20):
        self.base_url = (base_url or DEFAULT_API_BASE_URL).rstrip('/')
        self.token = token
        self.timeout_seconds = timeout_seconds

    def set_token(self, token):
        self.token = token

    def clear_token(self):
        self.token = None

    def _headers(self, extra=None):
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, endpoint, params=None, json_body=None, headers=None):
        url = f"{self.base_url}{endpoint}"
        try:
            resp = requests.request(
                method=method,
                url=url,
                headers=self._headers(headers),
                params=params,
                json=json_body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("[API] %s %s failed: %s", method, endpoint, exc)
            raise RemoteUnavailableError(f"Request to {endpoint} failed: {exc}") from exc

        if resp.status_code >= 400:
            try:
                message = (resp.json() or {}).get("message") or ""
            except (ValueError, AttributeError):
                message = ""
            message = message or f"HTTP error! status: {resp.status_code}"
            logger.error("[API] %s %s -> %s: %s", method, endpoint, resp.status_code, message)
            raise RemoteUnavailableError(message, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteUnavailableError(f"Invalid JSON from {endpoint}") from exc

    # Auth
    def login(self, email, password):
        response = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        if isinstance(response, dict) and response.get("token"):
            self.set_token(response["token"])
        return response

    def register(self, data):
        response = self._request("POST", "/auth/register", json_body=data)
        if isinstance(response, dict) and response.get("token"):
            self.set_token(response["token"])
        return response

    def get_current_user(self):
        return self._request("GET", "/auth/me")

    def change_password(self, current_password, new_password):
        return self._request(
            "PUT",
            "/auth/change-password",
            json_body={"currentPassword": current_password, "newPassword": new_password},
        )

    # Students
    def get_students(self, params=None):
        return self._request("GET", "/students", params=params)

    def get_student(self, student_id):
        return self._request("GET", f"/students/{student_id}")

    def create_student(self, data):
        return self._request("POST", "/students", json_body=data)

    def update_student(self, student_id, data):
        return self._request("PUT", f"/students/{student_id}", json_body=data)

    def delete_student(self, student_id):
        return self._request("DELETE", f"/students/{student_id}")

    def submit_public_lead(self, data):
        return self._request("POST", "/students/public/lead", json_body=data)

    # Users (admin only on the server)
    def get_users(self):
        return self._request("GET", "/users")

    def get_user(self, user_id):
        return self._request("GET", f"/users/{user_id}")

    def create_user(self, data):
        return self._request("POST", "/users", json_body=data)

    def update_user(self, user_id, data):
        return self._request("PUT", f"/users/{user_id}", json_body=data)

    def delete_user(self, user_id):
        return self._request("DELETE", f"/users/{user_id}")

    # Activities
    def get_activities(self, params=None):
        return self._request("GET", "/activities", params=params)

    def get_activity_stats(self, params=None):
        return self._request("GET", "/activities/stats", params=params)

    def log_activity(self, data):
        return self._request("POST", "/activities", json_body=data)
