# (c) Copyright Datacraft, 2026
"""
Long-poll registry.

Each in-flight page request runs as an asyncio task keyed by its URL so a
panel close or a resort change can drop every outstanding request at once.
"""
import asyncio
import logging
import weakref
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

_registries: "weakref.WeakSet[PollRegistry]" = weakref.WeakSet()


class PollRegistry:
	def __init__(self):
		self._tasks: dict[str, asyncio.Task] = {}
		self._failures: list[BaseException] = []
		_registries.add(self)

	def __len__(self) -> int:
		return len(self._tasks)

	def __contains__(self, url: str) -> bool:
		return url in self._tasks

	@property
	def active_urls(self) -> list[str]:
		return list(self._tasks.keys())

	def start(self, url: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
		"""Schedule a page fetch; a request already running for `url` is kept."""
		existing = self._tasks.get(url)
		if existing is not None and not existing.done():
			return existing

		task = asyncio.ensure_future(factory())
		self._tasks[url] = task
		task.add_done_callback(lambda t, key=url: self._forget(key, t))
		return task

	def _forget(self, url: str, task: asyncio.Task) -> None:
		if self._tasks.get(url) is task:
			del self._tasks[url]
		if task.cancelled():
			return
		error = task.exception()
		if error is not None:
			logger.warning(f"Long-poll request {url} failed: {error}")
			self._failures.append(error)

	def cancel_all(self) -> int:
		"""Cancel every outstanding request and clear the registry without awaiting."""
		tasks = list(self._tasks.values())
		self._tasks.clear()
		self._failures.clear()
		for task in tasks:
			task.cancel()
		if tasks:
			logger.debug(f"Cancelled {len(tasks)} long-poll requests")
		return len(tasks)

	async def wait(self) -> None:
		"""
		Wait until the chain of page requests has drained.

		The first failed request is re-raised once the rest are cancelled.
		"""
		while self._tasks and not self._failures:
			await asyncio.wait(
				list(self._tasks.values()),
				return_when=asyncio.FIRST_EXCEPTION,
			)
		if self._failures:
			error = self._failures[0]
			self.cancel_all()
			raise error


def cancel_all_polls() -> int:
	"""Cancel outstanding requests of every live registry."""
	return sum(registry.cancel_all() for registry in list(_registries))
