"""Activity processing pipeline"""

from engagement.pipeline.activity_pipeline import ActivityOutcome, ActivityPipeline

__all__ = ["ActivityOutcome", "ActivityPipeline"]
