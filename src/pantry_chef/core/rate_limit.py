"""Sliding-window rate limiting keyed by policy and client address.

The limiter is an ordinary service object: the application factory builds one
per app from settings and hands it to ``RateLimitMiddleware``. Counters live in
a ``limits`` async storage (in-memory by default) and use the moving-window
strategy, so a slot frees up exactly ``window_seconds`` after the hit that
consumed it.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from limits import RateLimitItemPerSecond
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string

from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from limits import RateLimitItem
    from limits.aio.storage import Storage

    from pantry_chef.core.config import Settings
    from pantry_chef.core.config.settings import RateLimitPolicySettings


logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """A named limit and the request paths it guards."""

    name: str
    limit: int
    window_seconds: int
    message: str
    paths: frozenset[str] = field(default_factory=frozenset)
    path_prefixes: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, config: RateLimitPolicySettings) -> RateLimitPolicy:
        return cls(
            name=config.name,
            limit=config.limit,
            window_seconds=config.window_seconds,
            message=config.message,
            paths=frozenset(config.paths),
            path_prefixes=tuple(config.path_prefixes),
        )

    @property
    def item(self) -> RateLimitItem:
        return RateLimitItemPerSecond(self.limit, self.window_seconds)

    def applies_to(self, path: str) -> bool:
        return path in self.paths or path.startswith(self.path_prefixes)


@dataclass(frozen=True)
class RateLimitRejection:
    """The policy that rejected a request and when to retry."""

    policy: RateLimitPolicy
    retry_after: int


class RateLimiter:
    """Checks requests against every policy that applies to their path.

    Policies are evaluated in configuration order. The first policy with no
    free slot rejects the request; an admitted request consumes one slot in
    every applicable policy.
    """

    def __init__(
        self,
        policies: list[RateLimitPolicy],
        storage_uri: str = "memory://",
    ) -> None:
        self.policies = policies
        self._storage: Storage = storage_from_string(_async_uri(storage_uri))
        self._strategy = MovingWindowRateLimiter(self._storage)

    @classmethod
    def from_settings(cls, settings: Settings) -> RateLimiter:
        config = settings.rate_limiting
        return cls(
            [RateLimitPolicy.from_settings(p) for p in config.policies],
            storage_uri=config.storage_uri,
        )

    def policies_for(self, path: str) -> list[RateLimitPolicy]:
        return [policy for policy in self.policies if policy.applies_to(path)]

    async def check(self, path: str, client_key: str) -> RateLimitRejection | None:
        """Record a hit for ``client_key`` and return a rejection if limited.

        A rejected request consumes no slot in any policy.
        """
        policies = self.policies_for(path)
        for policy in policies:
            if not await self._strategy.test(policy.item, policy.name, client_key):
                return await self._reject(policy, client_key)

        for policy in policies:
            # A concurrent request may have taken the last slot since the test.
            if not await self._strategy.hit(policy.item, policy.name, client_key):
                return await self._reject(policy, client_key)
        return None

    async def _reject(self, policy: RateLimitPolicy, client_key: str) -> RateLimitRejection:
        stats = await self._strategy.get_window_stats(policy.item, policy.name, client_key)
        retry_after = max(1, math.ceil(stats.reset_time - time.time()))
        logger.warning(
            "Rate limit exceeded",
            policy=policy.name,
            client=client_key,
            retry_after=retry_after,
        )
        return RateLimitRejection(policy=policy, retry_after=retry_after)

    async def reset(self) -> None:
        """Drop all counters."""
        await self._storage.reset()


def _async_uri(uri: str) -> str:
    return uri if uri.startswith("async+") else f"async+{uri}"


__all__ = ["RateLimitPolicy", "RateLimitRejection", "RateLimiter"]
