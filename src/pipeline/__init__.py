"""Pipeline modules — orchestration layer on top of the lifecycle engine.

  intake   — inbound messages -> drafts sent for review, or approval decisions
  publish  — queue head -> external target -> posted
  lineup   — weekly lineup of scheduled and upcoming items
"""

from contentq.pipeline.intake import InboundMessage, IntakePipeline, IntakeResult
from contentq.pipeline.lineup import LINEUP_SUBJECT, WEEKLY_SLOTS, build_lineup
from contentq.pipeline.publish import PublishDriver, PublishResult

__all__ = [
    "LINEUP_SUBJECT",
    "WEEKLY_SLOTS",
    "InboundMessage",
    "IntakePipeline",
    "IntakeResult",
    "PublishDriver",
    "PublishResult",
    "build_lineup",
]
