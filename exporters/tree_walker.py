"""Depth-first export of an article and all of its descendants."""

import logging
from pathlib import Path
from typing import List, NamedTuple, Optional, Set

from logger import DETAIL, HEADER
from models import Article, ArticleRef, ExportNode, ExportStats
from .attachment_manager import AttachmentManager
from .filesystem import ensure_directory, get_safe_filename, write_text_file
from .markdown_renderer import render_article_markdown

DEFAULT_MAX_DEPTH = 50
ARTICLE_DIR_MAX_LENGTH = 120
README_NAME = "README.md"


class _PendingArticle(NamedTuple):
    ref: ArticleRef
    parent_dir: Path
    depth: int
    parent_node: Optional[ExportNode]


def article_directory_name(article: Article) -> str:
    """Directory name for an article: its readable id, never its title."""
    return get_safe_filename(article.id_readable, ARTICLE_DIR_MAX_LENGTH) or get_safe_filename(article.id)


class ArticleTreeWalker:
    """
    Materializes articles on disk and descends into their children.

    The walk uses an explicit stack of pending articles instead of recursion.
    A run-wide set of visited ids stops cyclic parent/child data, and
    ``max_depth`` bounds how deep the export descends. Failures are contained
    to the article (or single attachment) they occur in; only
    ``YouTrackError`` subclasses such as ``AuthenticationError`` propagate.
    """

    def __init__(
        self,
        fetcher,
        attachment_manager: AttachmentManager,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the walker.

        Args:
            fetcher: ApiFetcher instance
            attachment_manager: AttachmentManager used for downloads
            max_depth: Deepest level (root = 0) that is still exported
            logger: Logger instance
        """
        self.fetcher = fetcher
        self.attachment_manager = attachment_manager
        self.max_depth = max_depth
        self.logger = logger or logging.getLogger('youtrack_kb_exporter.walker')

        self.visited: Set[str] = set()
        self.stats = ExportStats()

    def walk(self, root: ArticleRef, parent_dir: Path, depth: int = 0) -> Optional[ExportNode]:
        """
        Export ``root`` under ``parent_dir`` together with all descendants.

        Args:
            root: Reference to the article to export
            parent_dir: Directory that receives the article directory
            depth: Depth of ``root`` (0 for a root article)

        Returns:
            ExportNode tree of what was exported, or None if ``root`` itself was skipped
        """
        root_node: Optional[ExportNode] = None
        stack: List[_PendingArticle] = [_PendingArticle(root, Path(parent_dir), depth, None)]

        while stack:
            pending = stack.pop()
            indent = "  " * pending.depth

            if pending.ref.id in self.visited:
                self.logger.warning(
                    f"{indent}Skipping article: {pending.ref.label} (already exported, cyclic hierarchy)"
                )
                self.stats.cycles_detected += 1
                continue
            self.visited.add(pending.ref.id)

            node = self._export_article(pending, indent)
            if node is None:
                continue

            if pending.parent_node is None:
                root_node = node
            else:
                pending.parent_node.add_child(node)

            children = self.fetcher.get_child_articles(node.article.id)
            if not children:
                continue

            if pending.depth >= self.max_depth:
                self.logger.warning(
                    f"{indent}  Not descending into {len(children)} sub-article(s) of "
                    f"{pending.ref.label}: maximum depth {self.max_depth} reached"
                )
                self.stats.depth_limit_hits += 1
                continue

            self.logger.log(HEADER, f"{indent}  Processing {len(children)} sub-article(s)...")
            # Reversed so the first child is popped first.
            for child in reversed(children):
                stack.append(_PendingArticle(child, node.path, pending.depth + 1, node))

        return root_node

    def _export_article(self, pending: _PendingArticle, indent: str) -> Optional[ExportNode]:
        """Write one article's directory, attachments and README.md."""
        article = self.fetcher.get_article(pending.ref.id)
        if article is None:
            self.logger.warning(f"{indent}Skipping article: {pending.ref.label}")
            self.stats.articles_skipped += 1
            return None

        article_path = pending.parent_dir / article_directory_name(article)
        self.logger.info(f"{indent}Processing: {article.id_readable or article.id} - {article.summary or 'Untitled'}")

        try:
            ensure_directory(article_path)

            comments = self.fetcher.get_comments(article.id)
            if comments:
                self.logger.log(DETAIL, f"{indent}  Found: {len(comments)} comment(s)")

            attachments = self.fetcher.get_attachments(article.id)
            attachment_stats = self.attachment_manager.download_all(attachments, article_path, indent=indent)

            markdown = render_article_markdown(article, comments, attachments)
            write_text_file(article_path / README_NAME, markdown)
            self.logger.log(DETAIL, f"{indent}  ✓ Markdown created")
        except OSError as e:
            self.logger.error(f"{indent}Failed to write article {article.id_readable or article.id}: {e}")
            self.stats.articles_skipped += 1
            return None

        self.stats.articles_exported += 1
        self.stats.comments += len(comments)
        self.stats.attachments_total += len(attachments)
        self.stats.attachments_downloaded += attachment_stats['downloaded']
        self.stats.attachments_failed += attachment_stats['failed']

        return ExportNode(article=article, path=article_path, depth=pending.depth)


__all__ = ['ArticleTreeWalker', 'article_directory_name', 'DEFAULT_MAX_DEPTH', 'README_NAME']
