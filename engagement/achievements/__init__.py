"""Achievement badges"""

from engagement.achievements.evaluator import AchievementEvaluator
from engagement.achievements.rules import ACHIEVEMENT_RULES, AchievementRule

__all__ = ["AchievementEvaluator", "ACHIEVEMENT_RULES", "AchievementRule"]
