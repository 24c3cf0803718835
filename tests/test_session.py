"""
Tests for HTTP session construction.
"""

import http.server
import threading
import time
import unittest

from second_order.config import MAX_RETRIES, USER_AGENTS
from second_order.session import build_probe_session, build_session, random_user_agent


class _StatusHandler(http.server.BaseHTTPRequestHandler):
    """Answers every GET with ``server.status`` and counts the hits."""

    def do_GET(self):
        with self.server.lock:
            self.server.hits += 1
        self.send_response(self.server.status)
        for name, value in self.server.extra_headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


def _serve(status, headers=None):
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _StatusHandler)
    server.status = status
    server.extra_headers = headers or {}
    server.hits = 0
    server.lock = threading.Lock()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


class TestSessions(unittest.TestCase):
    def test_page_session(self):
        session = build_session(verify_ssl=False, headers={"X-Api-Key": "k"}, pool_size=5)
        self.assertFalse(session.verify)
        self.assertEqual(session.headers["X-Api-Key"], "k")
        self.assertIn(session.headers["User-Agent"], USER_AGENTS)
        adapter = session.get_adapter("https://example.com/")
        self.assertEqual(adapter.max_retries.total, MAX_RETRIES)
        self.assertEqual(adapter._pool_maxsize, 5)

    def test_page_session_retries_server_errors_only(self):
        retry = build_session().get_adapter("https://example.com/").max_retries
        self.assertTrue(retry.is_retry("GET", 502))
        self.assertFalse(retry.is_retry("GET", 429, has_retry_after=True))
        self.assertFalse(retry.is_retry("GET", 413, has_retry_after=True))

    def test_rate_limited_page_requested_once(self):
        server = _serve(429, {"Retry-After": "30"})
        self.addCleanup(server.server_close)
        self.addCleanup(server.shutdown)

        session = build_session()
        session.trust_env = False
        host, port = server.server_address
        t0 = time.monotonic()
        resp = session.get(f"http://{host}:{port}/", timeout=5)
        elapsed = time.monotonic() - t0

        self.assertEqual(resp.status_code, 429)
        self.assertEqual(server.hits, 1)
        self.assertLess(elapsed, 5)

    def test_configured_user_agent_wins(self):
        session = build_session(headers={"User-Agent": "custom"})
        self.assertEqual(session.headers["User-Agent"], "custom")

    def test_probe_session_never_retries(self):
        session = build_probe_session(headers={"Cookie": "a=b"})
        self.assertTrue(session.verify)
        self.assertEqual(session.headers["Cookie"], "a=b")
        self.assertEqual(session.get_adapter("http://example.com/").max_retries.total, 0)

    def test_random_user_agent(self):
        self.assertIn(random_user_agent(), USER_AGENTS)


if __name__ == "__main__":
    unittest.main()
