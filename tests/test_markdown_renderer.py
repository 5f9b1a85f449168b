"""Tests for README.md rendering of articles, comments and attachments."""

import unittest
from datetime import datetime

from exporters.markdown_renderer import build_article_document, format_timestamp, render_article_markdown
from models import Article, ArticleRef, Attachment, Comment, UserRef


def make_article(**overrides):
    values = dict(
        id="1-1",
        id_readable="KB-A-1",
        summary="Getting started",
        content="Hello **world**",
        created=1700000000000,
        updated=1700000500000,
        project="KB",
        reporter=UserRef(name="jane"),
    )
    values.update(overrides)
    return Article(**values)


class TestFormatTimestamp(unittest.TestCase):
    def test_zero_and_missing_are_unknown(self):
        self.assertEqual(format_timestamp(0), "Unknown")
        self.assertEqual(format_timestamp(None), "Unknown")
        self.assertEqual(format_timestamp("not a number"), "Unknown")

    def test_milliseconds_formatted_in_local_time(self):
        expected = datetime.fromtimestamp(1700000000).strftime('%Y-%m-%d %H:%M:%S')
        self.assertEqual(format_timestamp(1700000000123), expected)


class TestRenderArticle(unittest.TestCase):
    def test_minimal_article_uses_defaults(self):
        markdown = render_article_markdown(Article(id="1-9"))

        self.assertTrue(markdown.startswith("# Untitled\n"))
        self.assertIn("| **ID** | Unknown |", markdown)
        self.assertIn("| **Project** | Unknown |", markdown)
        self.assertIn("| **Created** | Unknown |", markdown)
        self.assertIn("*No content available*", markdown)
        self.assertNotIn("**Author**", markdown)
        self.assertNotIn("**Parent Article**", markdown)

    def test_section_order(self):
        comments = [Comment(author=UserRef(name="bob"), text="Nice", created=1700000000000)]
        attachments = [Attachment(name="a.png", size=10, url="/files/a", local_name="a.png")]
        document = build_article_document(make_article(), comments, attachments)

        self.assertEqual(
            document.headings(),
            ["Getting started", "Metadata", "Content", "Attachments", "Comments"]
        )

    def test_empty_attachments_and_comments_sections_omitted(self):
        markdown = render_article_markdown(make_article(), [], [])

        self.assertNotIn("## Attachments", markdown)
        self.assertNotIn("## Comments", markdown)

    def test_metadata_table(self):
        markdown = render_article_markdown(make_article())

        self.assertIn("| Property | Value |", markdown)
        self.assertIn("|----------|-------|", markdown)
        self.assertIn("| **ID** | KB-A-1 |", markdown)
        self.assertIn("| **Author** | jane |", markdown)
        self.assertIn(f"| **Updated** | {format_timestamp(1700000500000)} |", markdown)

    def test_unknown_reporter_row_omitted(self):
        markdown = render_article_markdown(make_article(reporter=UserRef(name="Unknown")))
        self.assertNotIn("**Author**", markdown)

    def test_parent_row(self):
        parent = ArticleRef(id="1-0", id_readable="KB-A-0", summary="Overview")
        markdown = render_article_markdown(make_article(parent=parent))
        self.assertIn("| **Parent Article** | KB-A-0 - Overview |", markdown)

    def test_pipe_escaped_in_table_cells(self):
        markdown = render_article_markdown(make_article(project="A|B"))
        self.assertIn("| **Project** | A\\|B |", markdown)

    def test_content_rendered_verbatim(self):
        markdown = render_article_markdown(make_article(content="Line 1\n\n- item"))
        self.assertIn("## Content\n\nLine 1\n\n- item", markdown)

    def test_single_comment_block(self):
        comment = Comment(author=UserRef(name="bob"), text="", created=1700000000000)
        markdown = render_article_markdown(make_article(), comments=[comment])

        self.assertEqual(markdown.count("### Comment 1"), 1)
        self.assertNotIn("### Comment 2", markdown)
        self.assertIn(f"### Comment 1 - bob ({format_timestamp(1700000000000)})", markdown)
        self.assertIn("*No text*", markdown)
        self.assertIn("---", markdown)

    def test_comment_without_author(self):
        markdown = render_article_markdown(make_article(), comments=[Comment(text="hi")])
        self.assertIn("### Comment 1 - Unknown (Unknown)", markdown)

    def test_attachment_listing(self):
        attachment = Attachment(
            name="my file.png",
            author=UserRef(name="ann"),
            created=1700000000000,
            size=2048,
            url="/api/files/1",
            local_name="my file.png"
        )
        markdown = render_article_markdown(make_article(), attachments=[attachment])

        self.assertIn("- **my file.png** (2.00 KB)", markdown)
        self.assertIn("  - Author: ann", markdown)
        self.assertIn("  - File: [attachments/my file.png](attachments/my%20file.png)", markdown)

    def test_attachment_link_uses_stored_name(self):
        attachment = Attachment(name="report?.pdf", size=None, local_name="report.pdf")
        markdown = render_article_markdown(make_article(), attachments=[attachment])

        self.assertIn("- **report?.pdf** (0.00 KB)", markdown)
        self.assertIn("(attachments/report.pdf)", markdown)
        self.assertIn("  - Author: Unknown", markdown)

    def test_document_ends_with_newline(self):
        self.assertTrue(render_article_markdown(make_article()).endswith("\n"))


if __name__ == '__main__':
    unittest.main()
