"""
Reception pipeline: from verified envelope to stored checkpoint.
"""

from .stages import ReceptionStage
from .receipt import CheckpointReceipt
from .pipeline import ReceptionPipeline

__all__ = ["ReceptionStage", "CheckpointReceipt", "ReceptionPipeline"]
