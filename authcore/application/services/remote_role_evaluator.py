"""Remote role evaluation: ask the authority about one company scope.

Fail-closed: every transport error, timeout or non-success answer resolves
to False. Calls can be bound to a RoleCheckLifetime so that closing the
owning dialog cancels them, and a newer call for the same question
supersedes an older one still in flight.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar

from authcore.application.interfaces.services import ICacheService, IRoleAuthority
from authcore.domain.entities.principal import Principal
from authcore.domain.exceptions import AuthcoreException
from authcore.infrastructure.cache.keys import role_check_key, role_check_pattern

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RoleCheckLifetime:
    """Owner of in-flight role checks, typically one open dialog.

    aclose() cancels every tracked task; checks started afterwards resolve
    False without I/O. Usable as an async context manager.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def track(self, task: asyncio.Task[Any]) -> None:
        """Cancel task when this lifetime closes."""
        if self._closed:
            task.cancel()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Run coro as a task owned by this lifetime.

        Raises:
            RuntimeError: If the lifetime is already closed.
        """
        if self._closed:
            coro.close()
            raise RuntimeError("RoleCheckLifetime is closed")
        task = asyncio.create_task(coro)
        self.track(task)
        return task

    async def aclose(self) -> None:
        """Cancel every in-flight task and wait for them to unwind."""
        self._closed = True
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> RoleCheckLifetime:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class RemoteRoleEvaluator:
    """Checks (principal, company, codes) questions against the authority.

    Answers are cached per question when a cache is available; failures are
    never cached and never retried automatically.
    """

    def __init__(
        self,
        authority: IRoleAuthority,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
        timeout_seconds: float = 10.0,
        self_service_shortcut: bool = False,
    ) -> None:
        self.authority = authority
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.timeout_seconds = timeout_seconds
        self.self_service_shortcut = self_service_shortcut
        self._inflight: dict[tuple[str, str, tuple[str, ...]], asyncio.Task[bool]] = {}

    async def check_roles(
        self,
        principal: Principal | None,
        company_id: str | None,
        required_codes: Iterable[str],
        *,
        lifetime: RoleCheckLifetime | None = None,
        target_user_id: str | None = None,
    ) -> bool:
        """Return whether principal holds every required code in company_id.

        Resolves False on any failure. Raises asyncio.CancelledError only when
        the caller or its lifetime was cancelled; a superseded call resolves False.
        """
        if lifetime is not None and lifetime.closed:
            return False
        if principal is None or not principal.token or not company_id:
            return False
        codes = tuple(sorted(set(required_codes)))
        if not codes:
            return True
        if (
            self.self_service_shortcut
            and target_user_id is not None
            and target_user_id == principal.id
        ):
            return True

        question = (principal.id, company_id, codes)
        previous = self._inflight.get(question)
        if previous is not None and not previous.done():
            logger.debug("Superseding in-flight role check for company %s", company_id)
            previous.cancel()
        coro = self._ask(principal, company_id, codes)
        task = lifetime.spawn(coro) if lifetime is not None else asyncio.create_task(coro)
        self._inflight[question] = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if (current is not None and current.cancelling()) or (
                lifetime is not None and lifetime.closed
            ):
                raise
            return False
        finally:
            if self._inflight.get(question) is task:
                del self._inflight[question]

    async def invalidate(self, principal_id: str, company_id: str | None = None) -> None:
        """Drop cached answers for a principal (optionally one company)."""
        if self.cache and self.cache.is_available():
            await self.cache.delete_pattern(role_check_pattern(principal_id, company_id))

    async def _ask(self, principal: Principal, company_id: str, codes: tuple[str, ...]) -> bool:
        key = self._cache_key(principal.id, company_id, codes)
        if key is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return bool(cached)
        try:
            async with asyncio.timeout(self.timeout_seconds):
                granted = await self.authority.check_roles(
                    principal.token, company_id=company_id, required_codes=list(codes)
                )
        except TimeoutError:
            logger.warning("Role check timed out for company %s", company_id)
            return False
        except AuthcoreException as e:
            logger.warning("Role check failed closed for company %s: %s", company_id, e.message)
            return False
        if key is not None:
            await self.cache.set(key, bool(granted), ttl=self.cache_ttl)
        return bool(granted)

    def _cache_key(
        self, principal_id: str, company_id: str, codes: tuple[str, ...]
    ) -> str | None:
        if not (self.cache and self.cache.is_available()):
            return None
        try:
            return role_check_key(principal_id, company_id, codes)
        except ValueError:
            logger.debug("Role check for company %s is not cacheable", company_id)
            return None
