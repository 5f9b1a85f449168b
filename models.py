"""Data models for the YouTrack knowledge base export pipeline."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


def _as_dict(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    """Coerce a JSON number to int, returning None for null or garbage."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class UserRef:
    """A YouTrack user or group reference (id + display name)."""

    id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional['UserRef']:
        if not isinstance(data, dict):
            return None
        return cls(id=data.get('id'), name=data.get('name'))


@dataclass
class ArticleRef:
    """Lightweight article reference as returned by list and childArticles endpoints."""

    id: str
    id_readable: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional['ArticleRef']:
        data = _as_dict(data)
        if not data.get('id'):
            return None
        return cls(
            id=str(data['id']),
            id_readable=data.get('idReadable'),
            summary=data.get('summary')
        )

    @property
    def label(self) -> str:
        """Readable id when known, internal id otherwise."""
        return self.id_readable or self.id


@dataclass
class Article:
    """Full knowledge base article snapshot."""

    id: str
    id_readable: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    created: Optional[int] = None
    updated: Optional[int] = None
    project: Optional[str] = None
    reporter: Optional[UserRef] = None
    parent: Optional[ArticleRef] = None
    has_star: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> Optional['Article']:
        """Build an article from an API payload; returns None when the payload has no id."""
        data = _as_dict(data)
        if not data.get('id'):
            return None
        return cls(
            id=str(data['id']),
            id_readable=data.get('idReadable'),
            summary=data.get('summary'),
            content=data.get('content'),
            created=_as_int(data.get('created')),
            updated=_as_int(data.get('updated')),
            project=_as_dict(data.get('project')).get('shortName'),
            reporter=UserRef.from_dict(data.get('reporter')),
            parent=ArticleRef.from_dict(data.get('parentArticle')),
            has_star=bool(data.get('hasStar', False))
        )

    def is_root(self) -> bool:
        """Check if this article is a root article (no parent)."""
        return self.parent is None

    def to_ref(self) -> ArticleRef:
        return ArticleRef(id=self.id, id_readable=self.id_readable, summary=self.summary)


@dataclass
class Comment:
    """Article comment. Visibility is captured for completeness but not rendered."""

    id: Optional[str] = None
    author: Optional[UserRef] = None
    text: Optional[str] = None
    created: Optional[int] = None
    permitted_groups: List[UserRef] = field(default_factory=list)
    permitted_users: List[UserRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> 'Comment':
        data = _as_dict(data)
        visibility = _as_dict(data.get('visibility'))
        groups = [UserRef.from_dict(g) for g in visibility.get('permittedGroups') or []]
        users = [UserRef.from_dict(u) for u in visibility.get('permittedUsers') or []]
        return cls(
            id=data.get('id'),
            author=UserRef.from_dict(data.get('author')),
            text=data.get('text'),
            created=_as_int(data.get('created')),
            permitted_groups=[g for g in groups if g],
            permitted_users=[u for u in users if u]
        )

    @property
    def is_restricted(self) -> bool:
        return bool(self.permitted_groups or self.permitted_users)


@dataclass
class Attachment:
    """Article attachment metadata."""

    id: Optional[str] = None
    name: Optional[str] = None
    author: Optional[UserRef] = None
    created: Optional[int] = None
    updated: Optional[int] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    extension: Optional[str] = None
    url: Optional[str] = None
    local_name: Optional[str] = None  # set by AttachmentManager

    @classmethod
    def from_dict(cls, data: Any) -> 'Attachment':
        data = _as_dict(data)
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            author=UserRef.from_dict(data.get('author')),
            created=_as_int(data.get('created')),
            updated=_as_int(data.get('updated')),
            size=_as_int(data.get('size')),
            mime_type=data.get('mimeType'),
            extension=data.get('extension'),
            url=data.get('url')
        )


@dataclass
class ExportNode:
    """An exported article paired with its destination directory."""

    article: Article
    path: Path
    depth: int = 0
    children: List['ExportNode'] = field(default_factory=list)

    def add_child(self, child: 'ExportNode') -> None:
        self.children.append(child)

    def get_all_descendants(self, include_self: bool = False) -> List['ExportNode']:
        """Get all descendant nodes in depth-first order."""
        descendants = [self] if include_self else []
        for child in self.children:
            descendants.append(child)
            descendants.extend(child.get_all_descendants())
        return descendants


@dataclass
class ExportStats:
    """Counters accumulated while exporting articles."""

    articles_exported: int = 0
    articles_skipped: int = 0
    comments: int = 0
    attachments_total: int = 0
    attachments_downloaded: int = 0
    attachments_failed: int = 0
    cycles_detected: int = 0
    depth_limit_hits: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


__all__ = [
    'UserRef',
    'ArticleRef',
    'Article',
    'Comment',
    'Attachment',
    'ExportNode',
    'ExportStats'
]
