"""
Export report generator: aggregates run statistics, logs the summary and
optionally writes it as JSON next to the exported tree.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from logger import DETAIL, SUCCESS, format_duration
from models import ExportStats

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class ExportReport:
    """Builds and emits the end-of-run summary."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize export report generator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger('youtrack_kb_exporter.report')

    def generate_report(
        self,
        stats: ExportStats,
        project_counts: Dict[str, int],
        total_articles: int,
        started: datetime,
        finished: datetime,
        output_dir: Union[str, Path],
        log_path: Optional[Union[str, Path]] = None,
        user_name: Optional[str] = None,
        exported_roots: Optional[Dict[str, int]] = None
    ) -> Dict[str, Any]:
        """
        Generate the export report.

        Args:
            stats: Aggregated walker statistics
            project_counts: Root article count per project
            total_articles: Number of articles returned by the bulk listing
            started: Run start time
            finished: Run end time
            output_dir: Export root directory
            log_path: Run log file, if any
            user_name: Name of the token owner
            exported_roots: Root articles per project whose tree was written;
                defaults to ``project_counts``

        Returns:
            Export report dictionary
        """
        if exported_roots is None:
            exported_roots = dict(project_counts)
        duration = (finished - started).total_seconds()
        return {
            'summary': {
                'projects': len(project_counts),
                'articles_listed': total_articles,
                'root_articles': sum(project_counts.values()),
                'roots_exported': sum(exported_roots.values()),
                **stats.to_dict(),
            },
            'projects': dict(project_counts),
            'exported_roots': dict(exported_roots),
            'user': user_name,
            'started': started.strftime(TIME_FORMAT),
            'finished': finished.strftime(TIME_FORMAT),
            'duration_seconds': duration,
            'duration_formatted': format_duration(duration),
            'output_directory': str(output_dir),
            'log_file': str(log_path) if log_path else None,
        }

    def log_summary(self, report: Dict[str, Any]) -> None:
        """Write the closing summary block to the run log."""
        summary = report.get('summary', {})
        separator = "=" * 40

        self.logger.log(SUCCESS, separator)
        self.logger.log(SUCCESS, "Download completed!")
        self.logger.log(DETAIL, f"  Projects: {summary.get('projects', 0)}")
        self.logger.log(
            DETAIL,
            f"  Root articles exported: {summary.get('roots_exported', 0)}/{summary.get('root_articles', 0)}"
        )
        self.logger.log(
            DETAIL,
            f"  Articles exported: {summary.get('articles_exported', 0)} "
            f"(skipped: {summary.get('articles_skipped', 0)})"
        )
        self.logger.log(DETAIL, f"  Comments: {summary.get('comments', 0)}")
        self.logger.log(
            DETAIL,
            f"  Attachments downloaded: {summary.get('attachments_downloaded', 0)}/"
            f"{summary.get('attachments_total', 0)} (failed: {summary.get('attachments_failed', 0)})"
        )
        if summary.get('cycles_detected') or summary.get('depth_limit_hits'):
            self.logger.warning(
                f"  Hierarchy anomalies: {summary.get('cycles_detected', 0)} cycle(s), "
                f"{summary.get('depth_limit_hits', 0)} depth limit hit(s)"
            )
        self.logger.log(SUCCESS, f"Output path: {report.get('output_directory')}")
        if report.get('log_file'):
            self.logger.log(SUCCESS, f"Log file: {report['log_file']}")
        self.logger.log(SUCCESS, f"Started: {report.get('started')}")
        self.logger.log(SUCCESS, f"Finished: {report.get('finished')} ({report.get('duration_formatted')})")
        self.logger.log(SUCCESS, separator)

    def export_json_report(self, report: Dict[str, Any], filepath: Union[str, Path]) -> None:
        """
        Export report to JSON file.

        Args:
            report: Export report dictionary
            filepath: Output file path
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)
            self.logger.log(DETAIL, f"JSON report exported to {filepath}")
        except OSError as e:
            self.logger.error(f"Failed to export JSON report: {str(e)}")


__all__ = ['ExportReport']
