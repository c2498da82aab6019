"""
FileScanner module for Code Guardian.

Provides recursive workspace discovery with include/exclude glob filtering,
a size cutoff, a depth limit and content fingerprinting.
"""

from .interfaces import FileScannerInterface
from .models import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MAX_FILE_SIZE, ScannedFile
from .patterns import PathMatcher, compile_patterns, expand_braces
from .scanner import FileScanner

__all__ = [
    # Main classes
    "FileScanner",
    "FileScannerInterface",
    "ScannedFile",
    # Pattern matching
    "PathMatcher",
    "compile_patterns",
    "expand_braces",
    # Constants
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_MAX_FILE_SIZE",
]
