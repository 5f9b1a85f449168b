"""Attachment manager: names and downloads the attachments of one article."""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Set

from tqdm import tqdm

from logger import DETAIL
from models import Attachment
from .filesystem import DEFAULT_MAX_LENGTH, get_safe_filename, unique_filename
from .markdown_renderer import ATTACHMENTS_DIR


class AttachmentManager:
    """
    Downloads article attachments into ``<article-dir>/attachments``.

    Each attachment is an independent unit of failure: a failed download is
    logged and counted, and the remaining attachments are still attempted.
    """

    def __init__(
        self,
        client,
        max_name_length: int = DEFAULT_MAX_LENGTH,
        download_attachments: bool = True,
        show_progress: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the attachment manager.

        Args:
            client: YouTrackClient instance used for downloads
            max_name_length: Maximum length of a stored attachment file name
            download_attachments: When False, names are assigned but nothing is fetched
            show_progress: Show a tqdm bar for multi-attachment articles on a TTY
            logger: Logger instance
        """
        self.client = client
        self.max_name_length = max_name_length
        self.download_attachments = download_attachments
        self.show_progress = show_progress
        self.logger = logger or logging.getLogger('youtrack_kb_exporter.attachments')

    def assign_local_names(self, attachments: List[Attachment]) -> None:
        """Give every attachment a safe file name, unique within the article."""
        taken: Set[str] = set()
        for attachment in attachments:
            safe_name = get_safe_filename(attachment.name or "unknown", self.max_name_length)
            if not safe_name:
                safe_name = get_safe_filename(f"attachment_{attachment.id or len(taken) + 1}", self.max_name_length)
            attachment.local_name = unique_filename(safe_name, taken)

    def download_all(self, attachments: List[Attachment], article_dir: Path, indent: str = "") -> Dict[str, int]:
        """
        Download all attachments of one article.

        Args:
            attachments: Attachment metadata in API order
            article_dir: Article output directory
            indent: Log prefix matching the article depth

        Returns:
            Per-article statistics dictionary
        """
        page_stats = {'total_attachments': 0, 'downloaded': 0, 'skipped': 0, 'failed': 0}
        if not attachments:
            return page_stats

        self.assign_local_names(attachments)

        if not self.download_attachments:
            self.logger.debug(f"{indent}  Attachment downloads disabled - skipping {len(attachments)}")
            return page_stats

        self.logger.log(DETAIL, f"{indent}  Downloading {len(attachments)} attachment(s)...")
        attachments_dir = Path(article_dir) / ATTACHMENTS_DIR
        attachments_dir.mkdir(parents=True, exist_ok=True)

        attachments_iter = attachments
        if self._should_show_progress(len(attachments)):
            attachments_iter = tqdm(attachments, desc=f"{indent}  attachments", leave=False)

        for attachment in attachments_iter:
            page_stats['total_attachments'] += 1

            if not attachment.url:
                self.logger.debug(f"{indent}    No download URL for '{attachment.name}'")
                page_stats['skipped'] += 1
                continue

            if self.client.download_attachment(attachment.url, attachments_dir / attachment.local_name):
                self.logger.log(DETAIL, f"{indent}    ✓ {attachment.local_name}")
                page_stats['downloaded'] += 1
            else:
                page_stats['failed'] += 1

        return page_stats

    def _should_show_progress(self, count: int) -> bool:
        """Check if a progress bar should be displayed."""
        return self.show_progress and count > 1 and sys.stdout.isatty()


__all__ = ['AttachmentManager']
