import socket
import unittest
from unittest.mock import patch

from net_guardrails import read_limited_text, redact_headers, validate_url


class _Resp:
    def __init__(self, chunks, headers=None, encoding="utf-8"):
        self._chunks = chunks
        self.headers = headers or {}
        self.encoding = encoding

    def iter_content(self, chunk_size=16384):
        yield from self._chunks


class TestValidateUrl(unittest.TestCase):
    def test_public_preview_host_passes(self):
        with patch("socket.getaddrinfo") as mock_dns:
            mock_dns.return_value = [(0, 0, 0, 0, ("151.101.1.1", 443))]
            validate_url("https://main--site--org.aem.page/qa/products")

    def test_invalid_scheme(self):
        with self.assertRaises(ValueError) as cm:
            validate_url("file:///etc/passwd")
        self.assertIn("Unsafe scheme", str(cm.exception))

    def test_missing_hostname(self):
        with self.assertRaises(ValueError) as cm:
            validate_url("https://")
        self.assertIn("Missing hostname", str(cm.exception))

    def test_private_ip_blocked(self):
        with patch("socket.getaddrinfo") as mock_dns:
            mock_dns.return_value = [(0, 0, 0, 0, ("10.0.1.2", 80))]
            with self.assertRaises(ValueError) as cm:
                validate_url("http://intranet.example")
            self.assertIn("private IP", str(cm.exception))

    def test_any_internal_address_blocks(self):
        with patch("socket.getaddrinfo") as mock_dns:
            mock_dns.return_value = [
                (0, 0, 0, 0, ("151.101.1.1", 443)),
                (0, 0, 0, 0, ("::1", 443, 0, 0)),
            ]
            with self.assertRaises(ValueError) as cm:
                validate_url("https://split-horizon.example")
            self.assertIn("::1", str(cm.exception))

    def test_dns_resolution_failure(self):
        with patch("socket.getaddrinfo") as mock_dns:
            mock_dns.side_effect = socket.gaierror("Name or service not known")
            with self.assertRaises(ValueError) as cm:
                validate_url("https://nonexistent-domain.example")
            self.assertIn("DNS resolution failed", str(cm.exception))


class TestRedactHeaders(unittest.TestCase):
    def test_authorization_is_redacted(self):
        redacted = redact_headers({"Authorization": "Basic c2VjcmV0", "Content-Type": "application/json"})
        self.assertEqual(redacted["Authorization"], "[REDACTED]")
        self.assertEqual(redacted["Content-Type"], "application/json")


class TestReadLimitedText(unittest.TestCase):
    def test_reads_all_chunks(self):
        text, too_large = read_limited_text(_Resp([b"<html>", b"</html>"]), 1024)
        self.assertEqual(text, "<html></html>")
        self.assertFalse(too_large)

    def test_content_length_over_limit(self):
        text, too_large = read_limited_text(_Resp([b"x"], headers={"Content-Length": "2048"}), 1024)
        self.assertEqual(text, "")
        self.assertTrue(too_large)

    def test_streamed_body_over_limit(self):
        text, too_large = read_limited_text(_Resp([b"x" * 600, b"x" * 600]), 1024)
        self.assertTrue(too_large)

    def test_unknown_encoding_falls_back_to_utf8(self):
        text, _ = read_limited_text(_Resp(["é".encode("utf-8")], encoding="no-such-codec"), None)
        self.assertEqual(text, "é")


if __name__ == "__main__":
    unittest.main()
