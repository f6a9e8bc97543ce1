"""Publishing queue — dense, per-category publish order."""

from contentq.queue.engine import DEFAULT_MIN_DEPTH, QueueEngine, QueueHealth

__all__ = ["DEFAULT_MIN_DEPTH", "QueueEngine", "QueueHealth"]
