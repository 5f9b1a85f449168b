"""In-memory stand-in for YouTrackClient used by walker and orchestrator tests."""

import copy
from pathlib import Path

from youtrack_client import AuthenticationError

UNAUTHORIZED = object()


class FakeYouTrackClient:
    """Maps API endpoints to canned payloads. Unknown endpoints behave like a 404 (None)."""

    def __init__(self, responses=None, base_url="https://youtrack.example.com"):
        self.base_url = base_url
        self.api_base_url = f"{base_url}/api"
        self.responses = responses if responses is not None else {}
        self.calls = []
        self.downloads = []
        self.failing_downloads = set()

    def get(self, endpoint, params=None):
        self.calls.append((endpoint, dict(params or {})))
        value = self.responses.get(endpoint)
        if value is UNAUTHORIZED:
            raise AuthenticationError("Unauthorized. Please check your token!")
        if callable(value):
            return value(params or {})
        return copy.deepcopy(value)

    def download_attachment(self, url, destination):
        self.downloads.append(url)
        if url in self.failing_downloads:
            return False
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(b"data")
        return True

    def close(self):
        pass

    def requested_articles(self):
        """Internal ids whose detail endpoint was requested, in call order."""
        ids = []
        for endpoint, _ in self.calls:
            parts = endpoint.strip('/').split('/')
            if len(parts) == 2 and parts[0] == 'articles':
                ids.append(parts[1])
        return ids


def article_payload(article_id, readable, summary=None, project="KB", parent=None, **extra):
    payload = {
        'id': article_id,
        'idReadable': readable,
        'summary': summary if summary is not None else f"Article {readable}",
        'content': f"Body of {readable}",
        'created': 1700000000000,
        'updated': 1700000100000,
        'project': {'shortName': project} if project else None,
        'reporter': {'name': 'jane'},
        'parentArticle': parent,
        'hasStar': False,
    }
    payload.update(extra)
    return payload


def child_ref(payload):
    return {'id': payload['id'], 'idReadable': payload['idReadable'], 'summary': payload['summary']}


def register_article(responses, payload, children=(), comments=None, attachments=None):
    """Register detail, comments, attachments and childArticles endpoints for one article."""
    base = f"/articles/{payload['id']}"
    responses[base] = payload
    responses[f"{base}/comments"] = [] if comments is None else list(comments)
    if attachments is not None:
        responses[f"{base}/attachments"] = list(attachments)
    else:
        responses[f"{base}/attachments"] = []
    responses[f"{base}/childArticles"] = [child_ref(child) for child in children]


def paged_listing(records):
    """Callable serving ``records`` through $skip/$top like the /articles endpoint."""
    def serve(params):
        skip = params.get('$skip', 0)
        top = params.get('$top', 100)
        return copy.deepcopy(records[skip:skip + top])
    return serve
