"""
Centralized services container module for Code Guardian.

Provides a shared container for the analyzers and services used by the CLI
and by embedding applications, so each entry point wires them the same way.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from guardian.analysis import (
    DatabaseAnalyzer,
    DevOpsAnalyzer,
    FullStackAnalyzer,
    LineHighlighter,
    QualityScorer,
    RuleSetAnalyzer,
    SecretDetector,
    SecurityScanner,
    SuggestionEngine,
)
from guardian.core.config import GuardianConfig, load_config
from guardian.infrastructure import FileWatcher, FileWatcherInterface
from guardian.services.diagnostics import InMemoryDiagnosticsPublisher
from guardian.services.metrics_collector import MetricsCollector
from guardian.services.workspace_scanner import WorkspaceScanner


@dataclass
class ServicesContainer:
    """
    Container holding all shared service instances.

    Attributes:
        config: Application configuration
        security_scanner: Rule-based vulnerability scanner
        secret_detector: Credential pattern detector
        quality_scorer: Maintainability scorer
        suggestion_engine: Heuristic improvement suggestions
        database_analyzer: Database security rule set
        devops_analyzer: Container, cluster, cloud and pipeline rule set
        fullstack_analyzer: Web application rule set
        highlighter: Locates findings within file text
        diagnostics: Sink for per-file diagnostics
        metrics_collector: Timing and watch counters
    """

    config: GuardianConfig
    security_scanner: SecurityScanner
    secret_detector: SecretDetector
    quality_scorer: QualityScorer
    suggestion_engine: SuggestionEngine
    database_analyzer: DatabaseAnalyzer
    devops_analyzer: DevOpsAnalyzer
    fullstack_analyzer: FullStackAnalyzer
    highlighter: LineHighlighter
    diagnostics: InMemoryDiagnosticsPublisher
    metrics_collector: MetricsCollector

    def get_rule_set_analyzer(self, kind: str) -> RuleSetAnalyzer:
        """
        Look up a rule-set analyzer by kind.

        Args:
            kind: ``database``, ``devops`` or ``fullstack``

        Raises:
            ValueError: If ``kind`` names no analyzer
        """
        analyzers: dict[str, RuleSetAnalyzer] = {
            "database": self.database_analyzer,
            "devops": self.devops_analyzer,
            "fullstack": self.fullstack_analyzer,
        }
        try:
            return analyzers[kind.lower()]
        except KeyError:
            raise ValueError(f"Unknown rule set: {kind}") from None

    def create_workspace_scanner(
        self,
        roots: Sequence[Path | str],
        file_watcher: Optional[FileWatcherInterface] = None,
        enable_real_time_scanning: Optional[bool] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> WorkspaceScanner:
        """
        Create a WorkspaceScanner wired to the shared analyzers.

        Args:
            roots: Workspace root directories
            file_watcher: Watcher for real-time scanning. Defaults to a
                watchdog-backed FileWatcher when real-time scanning is on.
            enable_real_time_scanning: Overrides ``config.watch.enabled``
            progress_callback: Optional callback(current, total, message)
        """
        real_time = (
            self.config.watch.enabled
            if enable_real_time_scanning is None
            else enable_real_time_scanning
        )
        default_watcher = None
        if file_watcher is None and real_time:
            default_watcher = file_watcher = FileWatcher()

        scanner = WorkspaceScanner(
            roots=roots,
            security_scanner=self.security_scanner,
            secret_detector=self.secret_detector,
            quality_scorer=self.quality_scorer,
            diagnostics=self.diagnostics,
            highlighter=self.highlighter,
            file_watcher=file_watcher,
            metrics_collector=self.metrics_collector,
            options=self.config.scan.to_scan_options(enable_real_time_scanning=real_time),
            debounce_ms=self.config.watch.debounce_ms,
            progress_callback=progress_callback,
        )
        if default_watcher is not None:
            default_watcher.set_path_filter(scanner.is_watchable)
        return scanner


def create_services(
    config_path: Optional[Path] = None,
    config: Optional[GuardianConfig] = None,
) -> ServicesContainer:
    """
    Create and initialize all services.

    Args:
        config_path: Optional path to configuration file. If None, uses
                    environment variables and defaults.
        config: Already loaded configuration; takes precedence over
                ``config_path``.

    Returns:
        ServicesContainer with all initialized services.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If the configuration file cannot be parsed.
    """
    if config is None:
        config = load_config(config_path)

    return ServicesContainer(
        config=config,
        security_scanner=SecurityScanner(cache_size=config.analysis.security_cache_size),
        secret_detector=SecretDetector(cache_size=config.analysis.secret_cache_size),
        quality_scorer=QualityScorer(cache_size=config.analysis.quality_cache_size),
        suggestion_engine=SuggestionEngine(cache_size=config.analysis.suggestion_cache_size),
        database_analyzer=DatabaseAnalyzer(cache_size=config.analysis.rule_set_cache_size),
        devops_analyzer=DevOpsAnalyzer(cache_size=config.analysis.rule_set_cache_size),
        fullstack_analyzer=FullStackAnalyzer(cache_size=config.analysis.rule_set_cache_size),
        highlighter=LineHighlighter(),
        diagnostics=InMemoryDiagnosticsPublisher(),
        metrics_collector=MetricsCollector(slow_operation_ms=config.watch.slow_operation_ms),
    )
