"""
Orchestration package for a YouTrack knowledge base export run.

It sequences the identity check, the bulk article listing, the per-project
tree walks and the closing summary.
"""

from .export_orchestrator import ExportOrchestrator, group_by_project
from .export_report import ExportReport

__all__ = [
    'ExportOrchestrator',
    'ExportReport',
    'group_by_project'
]
