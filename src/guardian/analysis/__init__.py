"""
Analysis Layer - Security scanner, secret detector, quality scorer, suggestions,
highlighting and the database, DevOps and full-stack rule sets.
"""

from guardian.analysis.database_analyzer import DATABASE_RULES, DatabaseAnalyzer
from guardian.analysis.devops_analyzer import DEVOPS_RULES, DevOpsAnalyzer
from guardian.analysis.fullstack_analyzer import FULLSTACK_RULES, FullStackAnalyzer
from guardian.analysis.highlighter import HighlightInfo, LineHighlighter
from guardian.analysis.quality_scorer import QualityScorer
from guardian.analysis.rule_set import (
    UNKNOWN_CONTEXT,
    CategorizedRule,
    RuleSetAnalyzer,
    categorized_rule,
    overall_severity,
)
from guardian.analysis.secret_detector import (
    SECRET_DETECTION_ERROR,
    SECRET_PATTERNS,
    SecretDetector,
    SecretPattern,
    mask_secret,
    severity_for_confidence,
)
from guardian.analysis.security_scanner import (
    SECURITY_ANALYSIS_ERROR,
    SECURITY_RULES,
    SecurityRule,
    SecurityScanner,
    classify_vulnerability_severity,
)
from guardian.analysis.suggestion_engine import (
    GENERIC_SUGGESTIONS,
    MAX_SUGGESTIONS,
    SUGGESTION_ERROR,
    SuggestionEngine,
    generate_suggestions,
)

__all__ = [
    # Security
    "SecurityScanner",
    "SecurityRule",
    "SECURITY_RULES",
    "SECURITY_ANALYSIS_ERROR",
    "classify_vulnerability_severity",
    # Secrets
    "SecretDetector",
    "SecretPattern",
    "SECRET_PATTERNS",
    "SECRET_DETECTION_ERROR",
    "mask_secret",
    "severity_for_confidence",
    # Quality
    "QualityScorer",
    # Suggestions
    "SuggestionEngine",
    "generate_suggestions",
    "GENERIC_SUGGESTIONS",
    "MAX_SUGGESTIONS",
    "SUGGESTION_ERROR",
    # Rule sets
    "RuleSetAnalyzer",
    "CategorizedRule",
    "categorized_rule",
    "overall_severity",
    "UNKNOWN_CONTEXT",
    "DatabaseAnalyzer",
    "DATABASE_RULES",
    "DevOpsAnalyzer",
    "DEVOPS_RULES",
    "FullStackAnalyzer",
    "FULLSTACK_RULES",
    # Highlighting
    "LineHighlighter",
    "HighlightInfo",
]
