"""
Export orchestrator: drives one complete knowledge base export run.

Sequence: identity check → bulk article listing → root articles grouped by
project → one tree walk per root article → summary.
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from config_loader import get_nested
from exporters import ArticleTreeWalker, AttachmentManager, ensure_directory, get_safe_filename
from fetchers import ApiFetcher
from logger import DETAIL, SUCCESS, ProgressTracker, log_section
from models import Article, ExportNode, ExportStats
from youtrack_client import ConnectionCheckError, YouTrackClient
from .export_report import ExportReport

UNKNOWN_PROJECT = "Unknown"
REPORT_FILE_NAME = "export_report.json"


def group_by_project(articles: List[Article]) -> Dict[str, List[Article]]:
    """
    Group articles by project short code.

    Articles without a project land in "Unknown". Groups are ordered by
    project code; within a group the input order is kept.
    """
    groups: Dict[str, List[Article]] = defaultdict(list)
    for article in articles:
        groups[article.project or UNKNOWN_PROJECT].append(article)
    return {project: groups[project] for project in sorted(groups)}


class ExportOrchestrator:
    """Central coordinator for a single export run."""

    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[YouTrackClient] = None,
        fetcher: Optional[ApiFetcher] = None,
        logger: Optional[logging.Logger] = None,
        log_path: Optional[Path] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Configuration dictionary (see config_loader.DEFAULT_CONFIG)
            client: YouTrackClient; built from config when omitted
            fetcher: ApiFetcher; built around ``client`` when omitted
            logger: Run logger
            log_path: Path of the run log file, reported in the summary
        """
        self.config = config
        self.logger = logger or logging.getLogger('youtrack_kb_exporter')
        self.log_path = log_path

        self.output_dir = Path(get_nested(config, 'export.output_directory'))
        self.client = client or YouTrackClient.from_config(config, logger=self.logger)
        self.fetcher = fetcher or ApiFetcher(
            self.client,
            page_size=get_nested(config, 'export.page_size', 100),
            max_pages=get_nested(config, 'export.max_pages', 1000),
            logger=self.logger
        )

        attachment_manager = AttachmentManager(
            self.client,
            max_name_length=get_nested(config, 'export.attachment_name_max_length', 50),
            download_attachments=get_nested(config, 'export.download_attachments', True),
            logger=self.logger
        )
        self.walker = ArticleTreeWalker(
            self.fetcher,
            attachment_manager,
            max_depth=get_nested(config, 'export.max_depth', 50),
            logger=self.logger
        )
        self.write_report = get_nested(config, 'export.write_report', False)
        self.exported: Dict[str, List[ExportNode]] = {}

    def run(self) -> Dict[str, Any]:
        """
        Execute the export.

        Returns:
            Export report dictionary

        Raises:
            AuthenticationError: On HTTP 401 from any call
            ConnectionCheckError: When the identity check fails
        """
        started = datetime.now()
        ensure_directory(self.output_dir)

        self.logger.log(SUCCESS, "Starting YouTrack Knowledge Base download...")
        self.logger.log(DETAIL, f"API URL: {self.client.api_base_url}")
        self.logger.log(DETAIL, f"Output path: {self.output_dir}")
        self.logger.info("")

        self.logger.info("Testing API connection...")
        user = self.fetcher.get_current_user()
        if user is None:
            raise ConnectionCheckError("Connection failed. Please check URL and token!")
        self.logger.log(SUCCESS, f"Connection successful! Logged in as: {user.name or 'Unknown'}")
        self.logger.info("")

        self.logger.info("Loading article list...")
        articles = self.fetcher.get_all_articles()
        self.logger.log(SUCCESS, f"Found: {len(articles)} articles total")

        root_articles = [article for article in articles if article.is_root()]
        self.logger.log(SUCCESS, f"Of which {len(root_articles)} are root articles (no parent)")
        self.logger.info("")

        projects = group_by_project(root_articles)
        self.logger.log(SUCCESS, f"Projects found: {len(projects)}")
        for project, project_articles in projects.items():
            self.logger.log(DETAIL, f"  - {project}: {len(project_articles)} articles")
        self.logger.info("")

        with ProgressTracker(total_items=len(projects), item_type='projects', logger=self.logger) as tracker:
            for project, project_articles in projects.items():
                nodes = self._export_project(project, project_articles)
                tracker.increment(success=len(nodes) == len(project_articles))

        finished = datetime.now()
        report_generator = ExportReport(self.logger)
        report = report_generator.generate_report(
            stats=self.walker.stats,
            project_counts={project: len(items) for project, items in projects.items()},
            exported_roots={project: len(nodes) for project, nodes in self.exported.items()},
            total_articles=len(articles),
            started=started,
            finished=finished,
            output_dir=self.output_dir,
            log_path=self.log_path,
            user_name=user.name
        )
        report_generator.log_summary(report)

        if self.write_report:
            report_generator.export_json_report(report, self.output_dir / REPORT_FILE_NAME)

        return report

    @property
    def stats(self) -> ExportStats:
        return self.walker.stats

    def _export_project(self, project: str, root_articles: List[Article]) -> List[ExportNode]:
        """Export every root article of one project into ``<output>/<project>``; returns the exported trees."""
        log_section(f"Project: {project}", logger=self.logger)

        project_dir = ensure_directory(self.output_dir / (get_safe_filename(project) or UNKNOWN_PROJECT))
        nodes: List[ExportNode] = []

        for article in root_articles:
            node = self.walker.walk(article.to_ref(), project_dir, depth=0)
            if node is not None:
                nodes.append(node)

        self.exported[project] = nodes
        self.logger.info("")
        return nodes


__all__ = ['ExportOrchestrator', 'group_by_project']
