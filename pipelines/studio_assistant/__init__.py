"""Studio Assistant - scheduling and messaging assistant for wellness businesses."""

from pipelines.studio_assistant.config import PIPELINE_NAME
from pipelines.studio_assistant.pipeline import build_pipeline, run_turn

__all__ = ["build_pipeline", "run_turn", "PIPELINE_NAME"]
