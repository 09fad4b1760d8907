"""Crisis keyword scanner for self-harm, suicide and harm-to-others phrases"""

from engagement.core.models import CrisisScanResult


class CrisisKeywordScanner:
    """
    Case-insensitive substring scan against a fixed phrase list.

    Purely advisory: it reports matches and leaves the response (crisis
    resources, pausing the conversation) to the caller. Stateless.
    """

    CRISIS_KEYWORDS = (
        # Suicide
        "suicide",
        "suicidal",
        "kill myself",
        "end my life",
        "take my own life",
        "want to die",
        "better off dead",
        "no reason to live",
        "don't want to be here anymore",
        # Self-harm
        "self-harm",
        "self harm",
        "hurt myself",
        "cut myself",
        "harm myself",
        "overdose",
        # Harm to others
        "kill someone",
        "hurt someone",
        "harm others",
        "hurt others",
    )

    def scan(self, text: str) -> CrisisScanResult:
        """Return every listed phrase found in text, in list order"""
        text_lower = (text or "").lower()
        matched = [keyword for keyword in self.CRISIS_KEYWORDS if keyword in text_lower]
        return CrisisScanResult(is_crisis=bool(matched), matched_keywords=matched)


def scan_for_crisis(text: str) -> CrisisScanResult:
    return CrisisKeywordScanner().scan(text)
