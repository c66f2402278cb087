import unittest
from unittest.mock import MagicMock, patch

import requests

from api_client import CrmApiClient, RemoteUnavailableError


def _response(status_code=200, payload=None, text=None):
    resp = MagicMock()
    resp.status_code = status_code
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    resp.text = text if text is not None else ("" if payload is None else "x")
    return resp


class CrmApiClientTests(unittest.TestCase):
    def setUp(self):
        self.client = CrmApiClient(base_url="http://crm.local/api/", timeout_seconds=5)

    @patch("api_client.requests.request")
    def test_get_students_sends_bearer_and_params(self, mock_request):
        mock_request.return_value = _response(payload=[{"id": "s1"}])
        self.client.set_token("tok-1")

        result = self.client.get_students({"status": "Lead"})

        self.assertEqual(result, [{"id": "s1"}])
        kwargs = mock_request.call_args.kwargs
        self.assertEqual(kwargs["method"], "GET")
        self.assertEqual(kwargs["url"], "http://crm.local/api/students")
        self.assertEqual(kwargs["params"], {"status": "Lead"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok-1")
        self.assertEqual(kwargs["timeout"], 5)

    @patch("api_client.requests.request")
    def test_login_stores_token(self, mock_request):
        mock_request.return_value = _response(payload={"token": "jwt-abc", "user": {"id": "u1"}})
        self.client.login("a@b.com", "pw")
        self.assertEqual(self.client.token, "jwt-abc")
        self.assertEqual(mock_request.call_args.kwargs["json"], {"email": "a@b.com", "password": "pw"})

        self.client.clear_token()
        self.assertIsNone(self.client.token)

    @patch("api_client.requests.request")
    def test_network_error_raises_remote_unavailable(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(RemoteUnavailableError):
            self.client.get_students()

    @patch("api_client.requests.request")
    def test_http_error_uses_server_message(self, mock_request):
        mock_request.return_value = _response(status_code=403, payload={"message": "Access denied"})
        with self.assertRaises(RemoteUnavailableError) as ctx:
            self.client.get_student("s1")
        self.assertEqual(str(ctx.exception), "Access denied")
        self.assertEqual(ctx.exception.status_code, 403)

    @patch("api_client.requests.request")
    def test_http_error_without_json_body(self, mock_request):
        mock_request.return_value = _response(status_code=502, payload=ValueError("no json"))
        with self.assertRaises(RemoteUnavailableError) as ctx:
            self.client.get_users()
        self.assertEqual(str(ctx.exception), "HTTP error! status: 502")

    @patch("api_client.requests.request")
    def test_invalid_json_raises_remote_unavailable(self, mock_request):
        mock_request.return_value = _response(payload=ValueError("bad json"))
        with self.assertRaises(RemoteUnavailableError):
            self.client.get_students()

    @patch("api_client.requests.request")
    def test_endpoint_routing(self, mock_request):
        mock_request.return_value = _response(payload={})
        self.client.update_student("s1", {"status": "Applied"})
        self.assertEqual(mock_request.call_args.kwargs["method"], "PUT")
        self.assertEqual(mock_request.call_args.kwargs["url"], "http://crm.local/api/students/s1")

        self.client.get_activity_stats({"startDate": "2024-01-01"})
        self.assertEqual(mock_request.call_args.kwargs["url"], "http://crm.local/api/activities/stats")

        self.client.submit_public_lead({"firstName": "A"})
        self.assertEqual(mock_request.call_args.kwargs["url"], "http://crm.local/api/students/public/lead")

        self.client.change_password("old", "new")
        self.assertEqual(
            mock_request.call_args.kwargs["json"],
            {"currentPassword": "old", "newPassword": "new"},
        )


if __name__ == "__main__":
    unittest.main()
