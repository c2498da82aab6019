"""
Workspace Scanner service.

Walks the workspace roots, runs the security, secret and quality analyzers
on every eligible file, keeps the per-file results and publishes
diagnostics. Optionally watches the roots and re-scans changed files after
a debounce window.
"""

import asyncio
import concurrent.futures
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional

from guardian.analysis.highlighter import LineHighlighter
from guardian.analysis.quality_scorer import QualityScorer
from guardian.analysis.secret_detector import SecretDetector
from guardian.analysis.security_scanner import SecurityScanner
from guardian.core.debouncer import Debouncer
from guardian.core.file_events import FileEvent
from guardian.core.file_scanner import FileScanner, FileScannerInterface
from guardian.core.findings import ScanResult, classify_file_severity
from guardian.infrastructure.file_watcher import FileWatcherInterface
from guardian.services.diagnostics import (
    DiagnosticsPublisher,
    InMemoryDiagnosticsPublisher,
    build_diagnostics,
)
from guardian.services.metrics_collector import MetricsCollector
from guardian.services.scan_models import ScanState, ScanSummary, WorkspaceScanOptions

logger = logging.getLogger(__name__)


class WorkspaceScanError(Exception):
    """Base exception for workspace scanner errors."""

    pass


class PathValidationError(WorkspaceScanError):
    """Raised when a workspace root is missing or not a directory."""

    pass


def _result_key(path: Path | str) -> str:
    return str(Path(path).resolve())


def _log_event_failure(future: concurrent.futures.Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error(f"File event handling failed: {error}", exc_info=error)


def sort_results(results: Sequence[ScanResult]) -> list[ScanResult]:
    """Order results by severity (critical first), then by path."""
    return sorted(results, key=lambda r: (-r.severity.rank, r.file_path))


class WorkspaceScanner:
    """
    Orchestrates scanning of one workspace.

    State moves IDLE -> SCANNING -> IDLE for a sweep, with SCANNING_FILE
    while an individual file is being analyzed. The result map holds one
    entry per scanned file, replaced on every re-scan.
    """

    def __init__(
        self,
        roots: Sequence[Path | str],
        security_scanner: SecurityScanner,
        secret_detector: SecretDetector,
        quality_scorer: QualityScorer,
        diagnostics: DiagnosticsPublisher | None = None,
        highlighter: LineHighlighter | None = None,
        file_watcher: FileWatcherInterface | None = None,
        metrics_collector: Optional[MetricsCollector] = None,
        options: WorkspaceScanOptions | None = None,
        debounce_ms: int = 500,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ):
        """
        Initialize the workspace scanner.

        Args:
            roots: Workspace root directories
            security_scanner: Analyzer for security vulnerabilities
            secret_detector: Analyzer for hard-coded credentials
            quality_scorer: Analyzer for maintainability issues
            diagnostics: Sink for per-file diagnostics
            highlighter: Locates findings for diagnostics
            file_watcher: Watcher used by ``start_watching``
            metrics_collector: Optional collector for timing metrics
            options: Scan options; defaults to WorkspaceScanOptions()
            debounce_ms: Quiet period before a changed file is re-scanned
            progress_callback: Optional callback(current, total, message)

        Raises:
            WorkspaceScanError: If no roots are given
        """
        if not roots:
            raise WorkspaceScanError("At least one workspace root is required")

        self._roots = [Path(root).resolve() for root in roots]
        self._security_scanner = security_scanner
        self._secret_detector = secret_detector
        self._quality_scorer = quality_scorer
        self._diagnostics = diagnostics if diagnostics is not None else InMemoryDiagnosticsPublisher()
        self._highlighter = highlighter or LineHighlighter()
        self._file_watcher = file_watcher
        self._metrics_collector = metrics_collector
        self._progress_callback = progress_callback

        self._options = options or WorkspaceScanOptions()
        self._file_scanner: FileScannerInterface = self._build_file_scanner(self._options)
        self._debouncer = Debouncer(delay_ms=debounce_ms, on_ready=self._on_debounce_ready)

        self._results: dict[str, ScanResult] = {}
        self._state = ScanState.IDLE
        self._current_file: str | None = None
        self._sweep_in_progress = False
        self._summary = ScanSummary()

        self._watching = False
        self._event_loop: asyncio.AbstractEventLoop | None = None

    @staticmethod
    def _build_file_scanner(options: WorkspaceScanOptions) -> FileScanner:
        return FileScanner(
            include_patterns=options.include_patterns,
            exclude_patterns=options.exclude_patterns,
            max_file_size=options.max_file_size,
            scan_depth=options.scan_depth,
        )

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    @property
    def options(self) -> WorkspaceScanOptions:
        return self._options

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def current_file(self) -> str | None:
        """Path being analyzed while in SCANNING_FILE, else None."""
        return self._current_file

    @property
    def diagnostics(self) -> DiagnosticsPublisher:
        return self._diagnostics

    @property
    def highlighter(self) -> LineHighlighter:
        return self._highlighter

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    def is_scanning(self) -> bool:
        return self._sweep_in_progress

    def is_watching(self) -> bool:
        return self._watching

    def get_summary(self) -> ScanSummary:
        """Statistics of the most recent sweep."""
        return self._summary

    def _validate_roots(self) -> None:
        for root in self._roots:
            if not root.exists():
                raise PathValidationError(f"Path does not exist: {root}")
            if not root.is_dir():
                raise PathValidationError(f"Path is not a directory: {root}")

    def _report_progress(self, current: int, total: int, message: str) -> None:
        """Report progress if callback is set."""
        if self._progress_callback:
            self._progress_callback(current, total, message)
        logger.debug(f"Progress: {current}/{total} - {message}")

    def _discover_files(self) -> list[Path]:
        files: list[Path] = []
        seen: set[Path] = set()
        for root in self._roots:
            for file_path in self._file_scanner.discover(root):
                if file_path not in seen:
                    seen.add(file_path)
                    files.append(file_path)
        return files

    async def scan_workspace(self, options: WorkspaceScanOptions | None = None) -> list[ScanResult]:
        """
        Scan every eligible file under the workspace roots.

        If a sweep is already running, logs a warning and returns the
        current results instead of starting another one.

        Args:
            options: Replaces the scanner options for this and later sweeps

        Returns:
            Results with at least one issue, sorted by severity then path

        Raises:
            PathValidationError: If a root is missing or not a directory
        """
        if self._sweep_in_progress:
            logger.warning("Workspace scan already in progress")
            return sort_results([r for r in self._results.values() if r.has_issues])

        self._validate_roots()

        if options is not None:
            self._options = options
            self._file_scanner = self._build_file_scanner(options)

        self._sweep_in_progress = True
        self._state = ScanState.SCANNING
        summary = ScanSummary()
        found: list[ScanResult] = []
        start_time = time.time()

        logger.info(
            f"Starting workspace scan of {len(self._roots)} root(s)",
            extra={
                "roots": [str(root) for root in self._roots],
                "max_workers": self._options.max_workers,
            },
        )

        try:
            self._report_progress(0, 0, "Discovering files...")
            files = await asyncio.to_thread(self._discover_files)
            summary.total_files = len(files)
            self._report_progress(0, len(files), "Scanning files...")

            batch_size = self._options.max_workers
            for batch_start in range(0, len(files), batch_size):
                batch = files[batch_start : batch_start + batch_size]
                outcomes = await asyncio.gather(
                    *(self.scan_file(file_path) for file_path in batch),
                    return_exceptions=True,
                )

                for file_path, outcome in zip(batch, outcomes):
                    if isinstance(outcome, BaseException):
                        logger.error(
                            f"Error scanning file {file_path}: {outcome}",
                            extra={"file_path": str(file_path)},
                        )
                        summary.failed_files.append(str(file_path))
                    elif outcome is None:
                        summary.skipped_files += 1
                    else:
                        summary.scanned_files += 1
                        if outcome.has_issues:
                            found.append(outcome)

                done = batch_start + len(batch)
                self._report_progress(done, len(files), f"Scanned {done} files")
        finally:
            summary.files_with_issues = len(found)
            summary.duration_seconds = time.time() - start_time
            self._summary = summary
            self._sweep_in_progress = False
            self._state = ScanState.IDLE
            self._current_file = None

        if self._metrics_collector:
            self._metrics_collector.record_operation(
                "scan_workspace",
                summary.duration_seconds * 1000,
                metadata={"files": summary.total_files},
            )

        logger.info(
            f"Workspace scan completed: {len(found)} file(s) with issues",
            extra=summary.to_dict(),
        )
        return sort_results(found)

    async def scan_file(self, file_path: Path | str) -> ScanResult | None:
        """
        Scan a single file.

        Cancels any pending debounced re-scan of the same file. Unreadable,
        oversized and blank files yield None and leave no result entry.

        Args:
            file_path: File to scan

        Returns:
            The file's ScanResult, or None if it was skipped
        """
        key = _result_key(file_path)
        path = Path(key)
        await self._debouncer.cancel(path)

        scanned = await asyncio.to_thread(self._file_scanner.read_file, path)
        if scanned is None or scanned.is_blank:
            logger.debug(f"Skipping file: {key}")
            return None

        self._state = ScanState.SCANNING_FILE
        self._current_file = key
        try:
            if self._metrics_collector:
                with self._metrics_collector.measure(
                    "scan_file", metadata={"file_path": key, "size_bytes": scanned.size_bytes}
                ):
                    return self._analyze(key, scanned.content)
            return self._analyze(key, scanned.content)
        finally:
            self._state = ScanState.SCANNING if self._sweep_in_progress else ScanState.IDLE
            self._current_file = None

    def _analyze(self, key: str, content: str) -> ScanResult:
        vulnerabilities = self._security_scanner.analyze(content)
        secrets = self._secret_detector.detect(content)
        quality_issues = self._quality_scorer.get_quality_metrics(content).issues

        result = ScanResult(
            file_path=key,
            vulnerabilities=vulnerabilities,
            secrets=secrets,
            quality_issues=quality_issues,
            severity=classify_file_severity(vulnerabilities, secrets, quality_issues),
        )

        self._results[key] = result
        self._highlighter.set_highlights(
            key,
            [
                *self._highlighter.highlight_security_issues(content, vulnerabilities),
                *self._highlighter.highlight_secrets(content, secrets),
                *self._highlighter.highlight_quality_issues(content, quality_issues),
            ],
        )
        self._diagnostics.publish(
            key,
            build_diagnostics(
                result,
                content,
                self._highlighter,
                vulnerability_records=self._security_scanner.get_vulnerability_records(),
                secret_records=self._secret_detector.get_secret_records(),
            ),
        )
        return result

    def clear_file_results(self, file_path: Path | str) -> None:
        """Remove the result, highlights and diagnostics of one file."""
        key = _result_key(file_path)
        self._results.pop(key, None)
        self._highlighter.clear_highlights(key)
        self._diagnostics.clear(key)

    def clear_all_results(self) -> None:
        """Remove every result, highlight and diagnostic."""
        self._results.clear()
        self._highlighter.clear_all()
        self._diagnostics.clear_all()

    def get_scan_results(self) -> dict[str, ScanResult]:
        """Get a snapshot of the result map keyed by file path."""
        return dict(self._results)

    def get_results_with_issues(self) -> list[ScanResult]:
        """Stored results that have issues, sorted by severity then path."""
        return sort_results([r for r in self._results.values() if r.has_issues])

    async def start_watching(self) -> None:
        """
        Subscribe the file watcher to every workspace root.

        Raises:
            WorkspaceScanError: If no watcher was supplied or watching already started
            PathValidationError: If a root is missing or not a directory
        """
        if self._file_watcher is None:
            raise WorkspaceScanError("No file watcher configured")
        if self._watching:
            raise WorkspaceScanError("Workspace scanner is already watching")

        self._validate_roots()
        self._event_loop = asyncio.get_running_loop()
        self._file_watcher.start(self._roots, self._on_file_event_sync)
        self._watching = True

        logger.info(
            "Started watching workspace",
            extra={
                "roots": [str(root) for root in self._roots],
                "real_time": self._options.enable_real_time_scanning,
                "debounce_ms": self._debouncer.delay_ms,
            },
        )

    async def stop_watching(self) -> None:
        """Stop the watcher and drop pending re-scans."""
        if not self._watching:
            logger.debug("Workspace scanner is not watching, nothing to stop")
            return

        await self._debouncer.cancel_all()
        if self._file_watcher is not None:
            self._file_watcher.stop()
        self._watching = False
        self._event_loop = None
        logger.info("Stopped watching workspace")

    def is_watchable(self, file_path: Path) -> bool:
        """Check whether events for ``file_path`` concern this workspace."""
        return any(self._file_scanner.matches_patterns(file_path, root) for root in self._roots)

    def _on_file_event_sync(self, event: FileEvent) -> None:
        """
        Synchronous callback for file events from the watcher thread.

        Schedules the async handler on the event loop. Failures surface
        in the log once the handler finishes.
        """
        if self._event_loop is None or not self._watching:
            return

        future = asyncio.run_coroutine_threadsafe(self._on_file_event(event), self._event_loop)
        future.add_done_callback(_log_event_failure)

    async def _on_file_event(self, event: FileEvent) -> None:
        if not self._watching:
            return

        logger.debug(
            "File change detected: %s - %s",
            event.event_type.value,
            event.file_path,
            extra={
                "event_type": event.event_type.value,
                "file_path": str(event.file_path),
                "timestamp": event.timestamp,
            },
        )

        if self._metrics_collector:
            self._metrics_collector.record_watch_event(event.event_type.value)

        for path in event.removed_paths:
            await self._debouncer.cancel(Path(_result_key(path)))
            self.clear_file_results(path)

        if not self._options.enable_real_time_scanning:
            return

        for path in event.changed_paths:
            if self.is_watchable(path):
                await self._debouncer.schedule(Path(_result_key(path)))

    async def _on_debounce_ready(self, path: Path) -> None:
        if self._metrics_collector:
            self._metrics_collector.record_rescan()

        result = await self.scan_file(path)
        if result is None:
            # File became blank, unreadable or oversized
            self.clear_file_results(path)
            return

        logger.info(
            f"Re-scanned {path}: {result.issue_count} issue(s), severity {result.severity.value}",
            extra={"file_path": str(path), "severity": result.severity.value},
        )

    async def dispose(self) -> None:
        """Stop watching, cancel pending re-scans and clear diagnostics."""
        await self.stop_watching()
        await self._debouncer.cancel_all()
        self._diagnostics.clear_all()
        self._highlighter.clear_all()
        self._state = ScanState.IDLE
        self._current_file = None
