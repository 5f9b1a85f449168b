"""Export package: writes YouTrack knowledge base articles to a local markdown tree.

Package Structure:
- filesystem: safe path components and file writes
- markdown_renderer: article + comments + attachments -> README.md text
- attachment_manager: per-article attachment naming and downloads
- tree_walker: depth-first export of an article and its descendants

Output layout:
    <output>/<project>/<readable-id>/README.md
    <output>/<project>/<readable-id>/attachments/<safe-name>
    <output>/<project>/<readable-id>/<child-readable-id>/...
"""

from .filesystem import get_safe_filename, unique_filename, ensure_directory, write_text_file
from .markdown_renderer import MarkdownDocument, format_timestamp, render_article_markdown
from .attachment_manager import AttachmentManager
from .tree_walker import ArticleTreeWalker

__all__ = [
    'get_safe_filename',
    'unique_filename',
    'ensure_directory',
    'write_text_file',
    'MarkdownDocument',
    'format_timestamp',
    'render_article_markdown',
    'AttachmentManager',
    'ArticleTreeWalker'
]
