"""Approval resolution: classified replies -> lifecycle transitions, applied once."""

from contentq.approval.classifier import IntentClassifier
from contentq.approval.guard import IdempotencyGuard
from contentq.approval.models import (
    Approve,
    ClassifiedReply,
    Intent,
    Resolution,
    Revise,
    parse_intent,
)
from contentq.approval.resolution import ApprovalResolver

__all__ = [
    "ApprovalResolver",
    "Approve",
    "ClassifiedReply",
    "IdempotencyGuard",
    "Intent",
    "IntentClassifier",
    "Resolution",
    "Revise",
    "parse_intent",
]
