"""Typed accessors for the YouTrack knowledge base endpoints."""

import logging
from typing import Any, List, Optional

from models import Article, ArticleRef, Attachment, Comment, UserRef
from .paginator import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE, fetch_paginated

ARTICLE_LIST_FIELDS = (
    "hasStar,content,created,updated,id,idReadable,reporter(name),summary,"
    "project(shortName),parentArticle(id,idReadable)"
)
ARTICLE_DETAIL_FIELDS = (
    "hasStar,content,created,updated,id,idReadable,reporter(name),summary,"
    "project(shortName),parentArticle(id,idReadable,summary)"
)
COMMENT_FIELDS = (
    "id,author(id,name),text,created,"
    "visibility(permittedGroups(id,name),permittedUsers(id,name))"
)
ATTACHMENT_FIELDS = "id,name,author(id,name),created,updated,size,mimeType,extension,url"
CHILD_ARTICLE_FIELDS = "id,summary,idReadable"
USER_FIELDS = "id,name"


def _as_list(payload: Any) -> List[Any]:
    return payload if isinstance(payload, list) else []


class ApiFetcher:
    """Fetches knowledge base articles and their nested resources via the REST API."""

    def __init__(
        self,
        client,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize API fetcher.

        Args:
            client: YouTrackClient instance
            page_size: Page size for the bulk article listing
            max_pages: Page cap for the bulk article listing
            logger: Logger instance (optional)
        """
        self.client = client
        self.page_size = page_size
        self.max_pages = max_pages
        self.logger = logger or logging.getLogger('youtrack_kb_exporter.fetcher')

    def get_current_user(self) -> Optional[UserRef]:
        """Identity of the token owner, or None if the call did not succeed."""
        payload = self.client.get('/users/me', params={'fields': USER_FIELDS})
        return UserRef.from_dict(payload)

    def get_all_articles(self) -> List[Article]:
        """Load every article visible to the token, in server order."""
        records = fetch_paginated(
            self.client,
            '/articles',
            ARTICLE_LIST_FIELDS,
            page_size=self.page_size,
            max_pages=self.max_pages,
            logger=self.logger,
            label="articles"
        )
        articles = [Article.from_dict(record) for record in records]
        return [article for article in articles if article is not None]

    def get_article(self, article_id: str) -> Optional[Article]:
        payload = self.client.get(f'/articles/{article_id}', params={'fields': ARTICLE_DETAIL_FIELDS})
        return Article.from_dict(payload)

    def get_comments(self, article_id: str) -> List[Comment]:
        payload = self.client.get(f'/articles/{article_id}/comments', params={'fields': COMMENT_FIELDS})
        return [Comment.from_dict(item) for item in _as_list(payload)]

    def get_attachments(self, article_id: str) -> List[Attachment]:
        payload = self.client.get(f'/articles/{article_id}/attachments', params={'fields': ATTACHMENT_FIELDS})
        return [Attachment.from_dict(item) for item in _as_list(payload)]

    def get_child_articles(self, article_id: str) -> List[ArticleRef]:
        payload = self.client.get(
            f'/articles/{article_id}/childArticles',
            params={'fields': CHILD_ARTICLE_FIELDS}
        )
        refs = [ArticleRef.from_dict(item) for item in _as_list(payload)]
        return [ref for ref in refs if ref is not None]


__all__ = [
    'ApiFetcher',
    'ARTICLE_LIST_FIELDS',
    'ARTICLE_DETAIL_FIELDS',
    'COMMENT_FIELDS',
    'ATTACHMENT_FIELDS',
    'CHILD_ARTICLE_FIELDS'
]
