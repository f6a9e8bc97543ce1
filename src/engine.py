"""Wire the store, queue, lifecycle and pipelines together from config."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from contentq.approval import ApprovalResolver, IdempotencyGuard, IntentClassifier
from contentq.config import ContentQConfig
from contentq.content import ContentCategory, ContentStore
from contentq.generation import ContentGenerator
from contentq.lifecycle import LifecycleStateMachine
from contentq.llm import call_claude
from contentq.pipeline import IntakePipeline, PublishDriver
from contentq.publishers import ContentPublisher, create_publisher
from contentq.queue import QueueEngine
from contentq.review import OutboxTransport

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    """Every long-lived collaborator, built once per process."""

    config: ContentQConfig
    store: ContentStore
    queue: QueueEngine
    transport: OutboxTransport
    lifecycle: LifecycleStateMachine
    guard: IdempotencyGuard
    resolver: ApprovalResolver
    generator: ContentGenerator
    classifier: IntentClassifier

    def intake_pipeline(self) -> IntakePipeline:
        return IntakePipeline(
            self.store,
            self.lifecycle,
            self.resolver,
            self.guard,
            self.generator,
            self.classifier,
        )

    def publishers(self) -> dict[ContentCategory, ContentPublisher]:
        return {
            category: create_publisher(
                self.config.publishing.target_for(category),
                ghost_config=self.config.to_ghost_config(),
                linkedin_config=self.config.to_linkedin_config(),
                markdown_dir=Path(self.config.markdown.directory),
            )
            for category in ContentCategory
        }

    def publish_driver(self) -> PublishDriver:
        return PublishDriver(self.store, self.queue, self.lifecycle, self.publishers())


def _resolve(base_dir: Path | None, raw: str) -> Path:
    path = Path(raw).expanduser()
    if base_dir is not None and not path.is_absolute():
        return base_dir / path
    return path


def build_engine(
    config: ContentQConfig,
    *,
    base_dir: Path | None = None,
    llm: Callable[..., str] = call_claude,
) -> Engine:
    """Build an Engine; relative paths in ``config`` resolve against ``base_dir``."""
    store = ContentStore(
        _resolve(base_dir, config.store.path),
        lock_timeout=config.store.lock_timeout_seconds,
    )
    queue = QueueEngine(store, min_depth=dict(config.queue.min_depth))
    transport = OutboxTransport(_resolve(base_dir, config.review.outbox_path))
    generator = ContentGenerator(config.to_generation_config(), llm=llm)
    lifecycle = LifecycleStateMachine(store, queue, reviser=generator, transport=transport)
    guard = IdempotencyGuard(store)
    resolver = ApprovalResolver(store, lifecycle, guard, transport)
    classifier = IntentClassifier(
        model=config.llm.model, timeout=config.llm.classify_timeout, llm=llm
    )
    logger.debug("Engine built with store at %s", store.path)
    return Engine(
        config=config,
        store=store,
        queue=queue,
        transport=transport,
        lifecycle=lifecycle,
        guard=guard,
        resolver=resolver,
        generator=generator,
        classifier=classifier,
    )
