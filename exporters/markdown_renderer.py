"""Render a knowledge base article with its comments and attachments as a README.md document."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence
from urllib.parse import quote

from models import Article, Attachment, Comment
from .filesystem import get_safe_filename

UNKNOWN = "Unknown"
UNTITLED = "Untitled"
NO_CONTENT = "*No content available*"
NO_TEXT = "*No text*"
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
ATTACHMENTS_DIR = "attachments"


def format_timestamp(value: Any) -> str:
    """
    Format an epoch-milliseconds timestamp as local ``YYYY-MM-DD HH:MM:SS``.

    Zero, missing and unparseable values come out as "Unknown".
    """
    if value is None or isinstance(value, bool):
        return UNKNOWN
    try:
        milliseconds = int(value)
    except (TypeError, ValueError):
        return UNKNOWN
    if milliseconds == 0:
        return UNKNOWN
    try:
        return datetime.fromtimestamp(milliseconds // 1000).strftime(TIMESTAMP_FORMAT)
    except (OverflowError, OSError, ValueError):
        return UNKNOWN


def _cell(value: str) -> str:
    """Escape a value for use inside a markdown table cell."""
    return value.replace('|', '\\|').replace('\n', ' ')


@dataclass
class Section:
    """One markdown section: an optional heading followed by blocks separated by blank lines."""

    heading: Optional[str] = None
    level: int = 2
    blocks: List[str] = field(default_factory=list)

    def add(self, block: str) -> 'Section':
        self.blocks.append(block)
        return self

    def render(self) -> str:
        parts = []
        if self.heading is not None:
            parts.append(f"{'#' * self.level} {self.heading}")
        parts.extend(self.blocks)
        return "\n\n".join(parts)


@dataclass
class MarkdownDocument:
    """Ordered list of sections rendered to text at the end."""

    sections: List[Section] = field(default_factory=list)

    def add_section(self, section: Optional[Section]) -> None:
        """Append ``section``; None (an omitted section) is ignored."""
        if section is not None:
            self.sections.append(section)

    def headings(self) -> List[str]:
        return [s.heading for s in self.sections if s.heading is not None]

    def render(self) -> str:
        return "\n\n".join(section.render() for section in self.sections) + "\n"


def markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def title_section(article: Article) -> Section:
    return Section(heading=article.summary or UNTITLED, level=1)


def metadata_section(article: Article) -> Section:
    rows = [
        ("**ID**", _cell(article.id_readable or UNKNOWN)),
        ("**Project**", _cell(article.project or UNKNOWN)),
    ]

    reporter = article.reporter.name if article.reporter else None
    if reporter and reporter != UNKNOWN:
        rows.append(("**Author**", _cell(reporter)))

    rows.append(("**Created**", format_timestamp(article.created)))
    rows.append(("**Updated**", format_timestamp(article.updated)))

    parent = article.parent
    if parent is not None and parent.id_readable:
        parent_label = f"{parent.id_readable} - {parent.summary}" if parent.summary else parent.id_readable
        rows.append(("**Parent Article**", _cell(parent_label)))

    return Section(heading="Metadata").add(markdown_table(("Property", "Value"), rows))


def content_section(article: Article) -> Section:
    content = article.content
    return Section(heading="Content").add(content if content else NO_CONTENT)


def attachment_file_name(attachment: Attachment) -> str:
    """File name the attachment is (or would be) stored under in the attachments directory."""
    return attachment.local_name or get_safe_filename(attachment.name) or attachment.name or UNKNOWN


def attachments_section(attachments: Sequence[Attachment]) -> Optional[Section]:
    """Attachment listing in API order, or None when there are no attachments."""
    if not attachments:
        return None

    section = Section(heading="Attachments")
    for attachment in attachments:
        size_kb = (attachment.size or 0) / 1024
        author = attachment.author.name if attachment.author and attachment.author.name else UNKNOWN
        file_name = attachment_file_name(attachment)
        link_text = f"{ATTACHMENTS_DIR}/{file_name}"
        link_target = f"{ATTACHMENTS_DIR}/{quote(file_name)}"
        section.add("\n".join([
            f"- **{attachment.name or UNKNOWN}** ({size_kb:.2f} KB)",
            f"  - Author: {author}",
            f"  - Created: {format_timestamp(attachment.created)}",
            f"  - File: [{link_text}]({link_target})",
        ]))
    return section


def comments_section(comments: Sequence[Comment]) -> Optional[Section]:
    """Comment thread in API order, or None when there are no comments."""
    if not comments:
        return None

    section = Section(heading="Comments")
    for index, comment in enumerate(comments, start=1):
        author = comment.author.name if comment.author and comment.author.name else UNKNOWN
        section.add(f"### Comment {index} - {author} ({format_timestamp(comment.created)})")
        section.add(comment.text if comment.text else NO_TEXT)
        section.add("---")
    return section


def build_article_document(
    article: Article,
    comments: Sequence[Comment] = (),
    attachments: Sequence[Attachment] = ()
) -> MarkdownDocument:
    document = MarkdownDocument()
    document.add_section(title_section(article))
    document.add_section(metadata_section(article))
    document.add_section(content_section(article))
    document.add_section(attachments_section(attachments))
    document.add_section(comments_section(comments))
    return document


def render_article_markdown(
    article: Article,
    comments: Sequence[Comment] = (),
    attachments: Sequence[Attachment] = ()
) -> str:
    """
    Render the README.md text for one article.

    Args:
        article: Article detail
        comments: Comments in API order
        attachments: Attachment metadata in API order

    Returns:
        Markdown document text
    """
    return build_article_document(article, comments, attachments).render()


__all__ = [
    'Section',
    'MarkdownDocument',
    'format_timestamp',
    'markdown_table',
    'attachment_file_name',
    'build_article_document',
    'render_article_markdown'
]
