"""MemKVClient tests with the HTTP session mocked out."""

import unittest
from unittest.mock import MagicMock

import requests

from memkv.client import MemKVClient


def fake_response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"" if body is None else b"{}"
    response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class MemKVClientTest(unittest.TestCase):

    def setUp(self):
        self.client = MemKVClient("http://kv.local:8080/", api_key="secret", timeout=3)
        self.client.session = MagicMock()
        self.client.session.headers = {"Authorization": "Bearer secret"}

    def test_bearer_header_set_on_session(self):
        client = MemKVClient("http://kv.local", api_key="secret")
        self.assertEqual(client.session.headers["Authorization"], "Bearer secret")
        client.close()

    def test_set_string(self):
        self.client.session.request.return_value = fake_response(204)

        self.assertEqual(self.client.set_string("foo", "bar", ttl=60), {})
        self.client.session.request.assert_called_once_with(
            "POST",
            "http://kv.local:8080/strings",
            json={"key": "foo", "value": "bar", "ttl": 60},
            timeout=3,
        )

    def test_get_string(self):
        self.client.session.request.return_value = fake_response(200, {"value": "bar"})

        self.assertEqual(self.client.get_string("foo"), {"value": "bar"})
        self.client.session.request.assert_called_once_with(
            "GET", "http://kv.local:8080/strings", params={"key": "foo"}, timeout=3
        )

    def test_list_operations(self):
        self.client.session.request.return_value = fake_response(204)
        self.client.set_list("q", ["a", "b"])
        self.client.push("q", "c")

        calls = self.client.session.request.call_args_list
        self.assertEqual(calls[0].args, ("POST", "http://kv.local:8080/lists/strings"))
        self.assertEqual(calls[0].kwargs["json"], {"key": "q", "list": ["a", "b"], "ttl": None})
        self.assertEqual(calls[1].args, ("POST", "http://kv.local:8080/lists/strings/push"))
        self.assertEqual(calls[1].kwargs["params"], {"key": "q", "value": "c"})

    def test_pop_returns_value(self):
        self.client.session.request.return_value = fake_response(200, {"value": "a"})
        self.assertEqual(self.client.pop("q"), "a")

    def test_error_status_raises(self):
        self.client.session.request.return_value = fake_response(404, {"detail": "key not found"})

        with self.assertRaises(requests.HTTPError):
            self.client.get_list("missing")

    def test_context_manager_closes_session(self):
        session = self.client.session
        with self.client:
            pass
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
