"""
Service Layer - WorkspaceScanner, diagnostics, metrics and ServicesContainer.
"""

from guardian.services.container import ServicesContainer, create_services
from guardian.services.diagnostics import (
    DIAGNOSTIC_SOURCE,
    Diagnostic,
    DiagnosticSeverity,
    DiagnosticsPublisher,
    InMemoryDiagnosticsPublisher,
    build_diagnostics,
)
from guardian.services.metrics_collector import MetricsCollector, OperationMetric
from guardian.services.scan_models import ScanState, ScanSummary, WorkspaceScanOptions
from guardian.services.workspace_scanner import (
    PathValidationError,
    WorkspaceScanError,
    WorkspaceScanner,
    sort_results,
)

__all__ = [
    # Container and factory
    "ServicesContainer",
    "create_services",
    # Workspace scanning
    "WorkspaceScanner",
    "WorkspaceScanOptions",
    "WorkspaceScanError",
    "PathValidationError",
    "ScanState",
    "ScanSummary",
    "sort_results",
    # Diagnostics
    "Diagnostic",
    "DiagnosticSeverity",
    "DiagnosticsPublisher",
    "InMemoryDiagnosticsPublisher",
    "DIAGNOSTIC_SOURCE",
    "build_diagnostics",
    # Metrics
    "MetricsCollector",
    "OperationMetric",
]
