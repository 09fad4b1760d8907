"""Personalization signals"""

from engagement.personalization.signals import PersonalizationSignalGenerator

__all__ = ["PersonalizationSignalGenerator"]
