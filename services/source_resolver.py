"""
Source Resolver

Ordered fallback across interchangeable data sources. Each artifact that can
be sourced several ways declares its sources as a priority-ordered list of
SourceProvider objects; the resolver returns the first usable result.

Resolution rules:
1. Providers are attempted strictly in order
2. A provider fails if it raises, or returns None or a non-collection
   payload; resolution moves on to the next provider
3. An empty collection is insufficient and also moves on
4. The first non-empty collection halts the chain; later providers are
   never called
5. If every provider is exhausted the result is empty. resolve() itself
   never raises for a source failure.

The resolver is a pure read path. Persisting the result is the caller's job.
"""

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from logging_config import setup_logging

logger = setup_logging(__name__, log_file="source_resolver.log")


@runtime_checkable
class SourceProvider(Protocol):
    """A single data source able to produce a collection, or fail."""

    name: str

    def attempt(self) -> Optional[Collection]:
        """Return a collection of results, None if unavailable, or raise."""
        ...


class FunctionSource:
    """Adapt a zero-argument callable into a SourceProvider."""

    def __init__(self, name: str, fn: Callable[[], Optional[Collection]]):
        self.name = name
        self._fn = fn

    def attempt(self) -> Optional[Collection]:
        return self._fn()

    def __repr__(self) -> str:
        return f"FunctionSource({self.name!r})"


@dataclass
class SourceAttempt:
    """Outcome of one provider attempt, kept for logging and tests."""
    name: str
    outcome: str
    detail: str = ""


@dataclass
class ResolveResult:
    """What resolve() found.

    Attributes:
        source: Name of the provider that produced the values, None if none did
        values: The usable collection, as a list (empty when exhausted)
        attempts: Every provider tried, in order, with its outcome
    """
    source: Optional[str] = None
    values: list = field(default_factory=list)
    attempts: list[SourceAttempt] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.values

    def __bool__(self) -> bool:
        return not self.is_empty


def _is_valid_payload(payload: Any) -> bool:
    return isinstance(payload, Collection) and not isinstance(payload, (str, bytes))


class SourceResolver:
    """Resolve a value by trying providers in priority order."""

    def __init__(self, artifact: str = "artifact"):
        self.artifact = artifact

    def resolve(self, providers: Sequence[SourceProvider]) -> ResolveResult:
        result = ResolveResult()
        for provider in providers:
            name = getattr(provider, "name", repr(provider))
            try:
                payload = provider.attempt()
            except Exception as e:
                logger.warning(f"[{self.artifact}] source {name} failed: {e}")
                result.attempts.append(SourceAttempt(name, "failed", str(e)))
                continue

            if payload is None:
                logger.info(f"[{self.artifact}] source {name} unavailable")
                result.attempts.append(SourceAttempt(name, "unavailable"))
                continue
            if not _is_valid_payload(payload):
                logger.warning(
                    f"[{self.artifact}] source {name} returned {type(payload).__name__}, "
                    "expected a collection"
                )
                result.attempts.append(SourceAttempt(name, "invalid", type(payload).__name__))
                continue
            if len(payload) == 0:
                logger.info(f"[{self.artifact}] source {name} returned no rows")
                result.attempts.append(SourceAttempt(name, "empty"))
                continue

            logger.info(f"[{self.artifact}] resolved from {name} ({len(payload)} values)")
            result.attempts.append(SourceAttempt(name, "used"))
            result.source = name
            result.values = list(payload)
            return result

        logger.warning(f"[{self.artifact}] all {len(providers)} sources exhausted")
        return result
