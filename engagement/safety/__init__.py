"""Text safety checks"""

from engagement.safety.crisis_scanner import CrisisKeywordScanner, scan_for_crisis

__all__ = ["CrisisKeywordScanner", "scan_for_crisis"]
