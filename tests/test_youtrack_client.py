"""Tests for YouTrackClient status classification and downloads."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from youtrack_client import AuthenticationError, YouTrackClient, resolve_download_url


def make_response(status, payload=None, chunks=None):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    response.iter_content.return_value = chunks or []
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class TestYouTrackClientGet(unittest.TestCase):
    def setUp(self):
        self.client = YouTrackClient("https://yt.example.com/", "perm:abc")

    def tearDown(self):
        self.client.close()

    def test_base_url_and_headers(self):
        self.assertEqual(self.client.api_base_url, "https://yt.example.com/api")
        self.assertEqual(self.client.session.headers['Authorization'], "Bearer perm:abc")
        self.assertEqual(self.client.session.headers['Accept'], "application/json")

    def test_success_returns_json(self):
        with patch.object(self.client.session, 'get', return_value=make_response(200, {'id': '1'})) as get:
            result = self.client.get('/users/me', params={'fields': 'id,name'})

        self.assertEqual(result, {'id': '1'})
        get.assert_called_once_with(
            "https://yt.example.com/api/users/me",
            params={'fields': 'id,name'},
            timeout=30
        )

    def test_not_found_returns_none_with_warning(self):
        with patch.object(self.client.session, 'get', return_value=make_response(404)):
            with self.assertLogs(self.client.logger, level='WARNING') as logs:
                result = self.client.get('/articles/1-1')

        self.assertIsNone(result)
        self.assertIn("Resource not found - /articles/1-1", logs.output[0])

    def test_unauthorized_raises(self):
        with patch.object(self.client.session, 'get', return_value=make_response(401)):
            with self.assertRaises(AuthenticationError):
                self.client.get('/users/me')

    def test_other_status_returns_none(self):
        with patch.object(self.client.session, 'get', return_value=make_response(500)):
            with self.assertLogs(self.client.logger, level='WARNING') as logs:
                result = self.client.get('/articles')

        self.assertIsNone(result)
        self.assertIn("API Error (500): /articles", logs.output[0])

    def test_network_error_returns_none(self):
        with patch.object(self.client.session, 'get', side_effect=requests.exceptions.ConnectionError("down")):
            with self.assertLogs(self.client.logger, level='WARNING'):
                self.assertIsNone(self.client.get('/articles'))

    def test_invalid_json_returns_none(self):
        response = make_response(200)
        response.json.side_effect = ValueError("no json")
        with patch.object(self.client.session, 'get', return_value=response):
            with self.assertLogs(self.client.logger, level='WARNING'):
                self.assertIsNone(self.client.get('/articles'))

    def test_missing_token_rejected(self):
        with self.assertRaises(ValueError):
            YouTrackClient("https://yt.example.com", "")


class TestDownloadAttachment(unittest.TestCase):
    def setUp(self):
        self.client = YouTrackClient("https://yt.example.com", "perm:abc", timeout=5)
        self.tmp = tempfile.TemporaryDirectory()
        self.destination = Path(self.tmp.name) / "attachments" / "file.bin"

    def tearDown(self):
        self.client.close()
        self.tmp.cleanup()

    def test_streams_body_to_file(self):
        response = make_response(200, chunks=[b"ab", b"", b"c"])
        with patch.object(self.client.session, 'get', return_value=response) as get:
            ok = self.client.download_attachment("/api/files/7?sign=x", self.destination)

        self.assertTrue(ok)
        self.assertEqual(self.destination.read_bytes(), b"abc")
        get.assert_called_once_with(
            "https://yt.example.com/api/files/7?sign=x", stream=True, timeout=5
        )

    def test_failed_download_returns_false(self):
        with patch.object(self.client.session, 'get', return_value=make_response(403)):
            with self.assertLogs(self.client.logger, level='WARNING'):
                ok = self.client.download_attachment("/api/files/7", self.destination)

        self.assertFalse(ok)
        self.assertFalse(self.destination.exists())

    def test_network_error_returns_false(self):
        with patch.object(self.client.session, 'get', side_effect=requests.exceptions.Timeout("slow")):
            with self.assertLogs(self.client.logger, level='WARNING'):
                self.assertFalse(self.client.download_attachment("/api/files/7", self.destination))

    def test_interrupted_transfer_leaves_no_file(self):
        def broken_stream(chunk_size):
            yield b"partial"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        response = make_response(200)
        response.iter_content.side_effect = broken_stream
        with patch.object(self.client.session, 'get', return_value=response):
            with self.assertLogs(self.client.logger, level='WARNING'):
                ok = self.client.download_attachment("/api/files/7", self.destination)

        self.assertFalse(ok)
        self.assertFalse(self.destination.exists())
        self.assertEqual(list(self.destination.parent.iterdir()), [])

    def test_interrupted_transfer_keeps_previous_copy(self):
        self.destination.parent.mkdir(parents=True)
        self.destination.write_bytes(b"intact")

        def broken_stream(chunk_size):
            yield b"par"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        response = make_response(200)
        response.iter_content.side_effect = broken_stream
        with patch.object(self.client.session, 'get', return_value=response):
            with self.assertLogs(self.client.logger, level='WARNING'):
                self.assertFalse(self.client.download_attachment("/api/files/7", self.destination))

        self.assertEqual(self.destination.read_bytes(), b"intact")

    def test_unauthorized_download_raises(self):
        with patch.object(self.client.session, 'get', return_value=make_response(401)):
            with self.assertRaises(AuthenticationError):
                self.client.download_attachment("/api/files/7", self.destination)


class TestResolveDownloadUrl(unittest.TestCase):
    def test_relative_url_joined_once(self):
        self.assertEqual(
            resolve_download_url("https://yt.example.com/", "/api/files/1"),
            "https://yt.example.com/api/files/1"
        )
        self.assertEqual(
            resolve_download_url("https://yt.example.com", "api/files/1"),
            "https://yt.example.com/api/files/1"
        )

    def test_absolute_url_kept(self):
        url = "https://cdn.example.com/files/1"
        self.assertEqual(resolve_download_url("https://yt.example.com", url), url)


if __name__ == '__main__':
    unittest.main()
