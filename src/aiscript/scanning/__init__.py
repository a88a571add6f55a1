"""Reference scanning and dialect detection."""

from aiscript.scanning.dialect import detect_dialect, dialect_for_file
from aiscript.scanning.scanner import ReferenceScanner

__all__ = ["ReferenceScanner", "detect_dialect", "dialect_for_file"]
