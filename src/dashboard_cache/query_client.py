"""In-memory query cache with de-duplicated, retried background fetches.

The client maps each query key to one cache entry. Entries are created on
first use, refreshed by fetches, and evicted ``gc_time`` seconds after the
last observer leaves. All mutation happens on the event loop thread, so
the only coordination needed is the one-fetch-per-key rule: a request for
a key that is already being fetched attaches to the running task.

Usage:
    ```python
    client = QueryClient()

    # Imperative read: cached data while fresh, otherwise fetch and wait
    stats = await client.fetch_query(("dashboard", "stats"), source.get_stats)

    # Observed read: returns at once, fetches in the background
    observer = client.observe(("dashboard", "stats"), source.get_stats, policy)
    observer.subscribe(lambda result: print(result.status))
    ```
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterator
from datetime import datetime
from typing import Any

from pydantic_core import to_json
from tenacity import AsyncRetrying, RetryCallState, before_sleep_log, retry_if_exception, stop_after_attempt

from dashboard_cache.entities import DEFAULT_POLICY, CacheStats, QueryPolicy, QueryResult
from dashboard_cache.errors import QueryCancelledError
from dashboard_cache.keys import QueryKey, matches_prefix

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[[QueryResult], None]
Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def _retrying(
    policy: QueryPolicy,
    sleep: Sleep,
    before_sleep: Callable[[RetryCallState], None],
) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(policy.retry + 1),
        wait=lambda retry_state: policy.retry_delay(retry_state.attempt_number - 1),
        retry=retry_if_exception(policy.should_retry),
        before_sleep=before_sleep,
        sleep=sleep,
        reraise=True,
    )


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are recorded on the entry; nobody has to await the task.
    if not task.cancelled():
        task.exception()


class Query:
    """Mutable cache entry for one query key."""

    def __init__(
        self,
        key: QueryKey,
        fetcher: Fetcher | None,
        policy: QueryPolicy,
        created_at: float,
    ) -> None:
        self.key = key
        self.fetcher = fetcher
        self.policy = policy
        self.data: Any = None
        self.has_data = False
        self.data_updated_at = 0.0
        self.error: BaseException | None = None
        self.error_updated_at = 0.0
        self.status = "pending"
        self.failure_count = 0
        self.is_invalidated = False
        self.invalidations = 0
        self.inactive_since: float | None = created_at
        self.observers: set["QueryObserver"] = set()
        self.task: asyncio.Task | None = None
        self.gc_handle: asyncio.TimerHandle | None = None
        self.interval_task: asyncio.Task | None = None

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()

    def is_stale_by(self, stale_time: float, now: float) -> bool:
        if not self.has_data or self.is_invalidated:
            return True
        return now - self.data_updated_at >= stale_time

    def snapshot(self, policy: QueryPolicy, now: float) -> QueryResult:
        """Build the result an observer with ``policy`` sees at ``now``."""
        use_placeholder = not self.has_data and policy.placeholder is not None
        if self.has_data:
            data = self.data
        else:
            data = policy.placeholder_data()

        return QueryResult(
            key=self.key,
            data=data,
            error=self.error,
            status=self.status,
            fetch_status="fetching" if self.is_fetching else "idle",
            data_updated_at=self.data_updated_at,
            error_updated_at=self.error_updated_at,
            failure_count=self.failure_count,
            is_stale=self.is_stale_by(policy.stale_time, now),
            is_placeholder_data=use_placeholder,
            has_data=self.has_data,
        )

    def reset(self) -> None:
        self.data = None
        self.has_data = False
        self.data_updated_at = 0.0
        self.error = None
        self.error_updated_at = 0.0
        self.status = "pending"
        self.failure_count = 0
        self.is_invalidated = False


class QueryClient:
    """Cache context shared by every query of an application.

    Construct one per application (or per test) and pass it to the
    services that need it. ``clear()`` tears everything down.

    Args:
        default_policy: Policy used when a query does not bring its own.
        clock: Returns the current time in seconds. Defaults to time.time.
        sleep: Awaitable used for retry backoff. Defaults to asyncio.sleep.
    """

    def __init__(
        self,
        default_policy: QueryPolicy | None = None,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._default_policy = default_policy or DEFAULT_POLICY
        self._clock = clock
        self._sleep = sleep
        self._queries: dict[QueryKey, Query] = {}

    @property
    def default_policy(self) -> QueryPolicy:
        return self._default_policy

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, key: object) -> bool:
        return key in self._queries

    def keys(self) -> list[QueryKey]:
        return list(self._queries)

    # Reads

    def observe(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy | None = None,
    ) -> "QueryObserver":
        """Subscribe to a query, fetching in the background when needed.

        Must be called from a running event loop.

        Returns:
            A mounted QueryObserver. Close it when the view goes away.
        """
        observer = QueryObserver(self, key, fetcher, policy or self._default_policy)
        observer.mount()
        return observer

    async def fetch_query(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy | None = None,
    ) -> Any:
        """Return fresh data for ``key``, fetching only when the cache is stale.

        Raises:
            QueryCancelledError: If the fetch was cancelled by ``reset_queries``
                or ``clear`` while the caller was waiting.
            Exception: The last fetch error once retries are exhausted.
        """
        query = self._build_query(key, fetcher, policy)
        stale_time = (policy or query.policy).stale_time
        if not query.is_stale_by(stale_time, self._clock()):
            logger.debug("Cache hit for %s", key)
            return query.data

        logger.debug("Cache miss for %s", key)
        task = self._fetch(query, fetcher)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # Only the shared task was cancelled, not this caller.
            current = asyncio.current_task()
            if task.cancelled() and current is not None and not current.cancelling():
                raise QueryCancelledError(f"Fetch of {key} was cancelled") from None
            raise

    async def prefetch_query(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy | None = None,
    ) -> None:
        """Warm the cache for ``key``. Failures are logged and dropped."""
        try:
            await self.fetch_query(key, fetcher, policy)
        except Exception as e:
            logger.debug("Prefetch of %s failed: %s", key, e)

    def get_query_data(self, key: QueryKey) -> Any:
        query = self._queries.get(key)
        return query.data if query is not None else None

    def get_query_state(self, key: QueryKey) -> QueryResult | None:
        query = self._queries.get(key)
        if query is None:
            return None
        return query.snapshot(query.policy, self._clock())

    def set_query_data(self, key: QueryKey, data: Any) -> Any:
        """Replace the cached data for ``key`` as if it had just been fetched."""
        query = self._build_query(key, None, None)
        self._store_success(query, data, query.invalidations)
        self._notify(query)
        return data

    async def mutate(self, mutation_fn: Fetcher, policy: QueryPolicy | None = None) -> Any:
        """Run a state-changing call with the retry rules of ``policy``.

        Nothing is cached; the caller decides what to invalidate afterwards.

        Raises:
            Exception: The last error once retries are exhausted.
        """
        policy = policy or self._default_policy
        retrying = _retrying(policy, self._sleep, before_sleep_log(logger, logging.WARNING))
        return await retrying(mutation_fn)

    # Invalidation

    def invalidate_queries(self, prefix: QueryKey = ()) -> int:
        """Mark every entry under ``prefix`` stale, whatever its age.

        Entries with observers refetch right away; the rest refetch on
        their next read.

        Returns:
            Number of entries invalidated
        """
        count = 0
        for query in self._match(prefix):
            query.is_invalidated = True
            query.invalidations += 1
            count += 1
            if query.observers and query.fetcher is not None:
                self._fetch(query)
            else:
                self._notify(query)

        logger.info("Invalidated %d queries under %s", count, prefix)
        return count

    def reset_queries(self, prefix: QueryKey = ()) -> int:
        """Return every entry under ``prefix`` to its initial, data-less state.

        In-flight fetches for those entries are cancelled. Observed entries
        fetch again.

        Returns:
            Number of entries reset
        """
        count = 0
        for query in self._match(prefix):
            if query.task is not None:
                query.task.cancel()
                query.task = None
            query.reset()
            count += 1
            if query.observers and query.fetcher is not None:
                self._fetch(query)
            else:
                self._notify(query)
        return count

    def remove_queries(self, prefix: QueryKey = ()) -> int:
        """Drop every entry under ``prefix`` from memory.

        Returns:
            Number of entries removed
        """
        removed = list(self._match(prefix))
        for query in removed:
            self._remove(query)
        return len(removed)

    def collect_garbage(self) -> int:
        """Evict unobserved entries that have been inactive for their gc_time.

        Returns:
            Number of entries evicted
        """
        now = self._clock()
        expired = [
            query
            for query in self._queries.values()
            if not query.observers
            and not query.is_fetching
            and query.inactive_since is not None
            and now - query.inactive_since >= query.policy.gc_time
        ]
        for query in expired:
            self._remove(query)
        return len(expired)

    def get_cache_stats(self) -> CacheStats:
        now = self._clock()
        fresh = stale = errors = loading = size = 0
        for query in self._queries.values():
            is_stale = query.is_stale_by(query.policy.stale_time, now)
            if query.status == "success" and not is_stale:
                fresh += 1
            if is_stale:
                stale += 1
            if query.status == "error":
                errors += 1
            if query.status == "pending":
                loading += 1
            if query.has_data:
                size += len(to_json(query.data, fallback=str))

        return CacheStats(
            total_queries=len(self._queries),
            fresh_queries=fresh,
            stale_queries=stale,
            error_queries=errors,
            loading_queries=loading,
            cache_size=size,
        )

    def clear(self) -> None:
        """Cancel all pending work and empty the cache."""
        for query in list(self._queries.values()):
            self._cancel_timers(query)
            if query.task is not None:
                query.task.cancel()
                query.task = None
        self._queries.clear()

    # Internals

    def _match(self, prefix: QueryKey) -> Iterator[Query]:
        return iter([query for key, query in self._queries.items() if matches_prefix(key, prefix)])

    def _build_query(
        self,
        key: QueryKey,
        fetcher: Fetcher | None,
        policy: QueryPolicy | None,
    ) -> Query:
        query = self._queries.get(key)
        if query is None:
            query = Query(key, fetcher, policy or self._default_policy, self._clock())
            self._queries[key] = query
            self._schedule_gc(query)
        elif query.fetcher is None:
            query.fetcher = fetcher
        return query

    def _fetch(self, query: Query, fetcher: Fetcher | None = None) -> asyncio.Task:
        if query.is_fetching:
            return query.task

        fetcher = fetcher or query.fetcher
        if fetcher is None:
            raise ValueError(f"No fetcher registered for query {query.key}")

        task = asyncio.get_running_loop().create_task(self._run_fetch(query, fetcher))
        task.add_done_callback(_consume_exception)
        query.task = task
        self._notify(query)
        return task

    async def _run_fetch(self, query: Query, fetcher: Fetcher) -> Any:
        policy = query.policy
        invalidations = query.invalidations
        retrying = _retrying(policy, self._sleep, self._before_retry(query))

        query.failure_count = 0
        succeeded = False
        try:
            data = await retrying(fetcher)
        except Exception as e:
            query.error = e
            query.error_updated_at = self._clock()
            query.status = "error"
            query.failure_count += 1
            logger.warning("Query %s failed after %d attempts: %s", query.key, query.failure_count, e)
            raise
        else:
            self._store_success(query, data, invalidations)
            succeeded = True
            return data
        finally:
            if query.task is asyncio.current_task():
                query.task = None
            self._notify(query)
            # Invalidated while in flight: the data we got may predate it.
            if succeeded and query.is_invalidated and query.observers:
                self._fetch(query)

    def _before_retry(self, query: Query) -> Callable[[RetryCallState], None]:
        log_retry = before_sleep_log(logger, logging.WARNING)

        def before_sleep(retry_state: RetryCallState) -> None:
            query.failure_count += 1
            self._notify(query)
            log_retry(retry_state)

        return before_sleep

    def _store_success(self, query: Query, data: Any, invalidations: int) -> None:
        query.data = data
        query.has_data = True
        query.data_updated_at = self._clock()
        query.error = None
        query.status = "success"
        query.failure_count = 0
        if query.invalidations == invalidations:
            query.is_invalidated = False

    def _notify(self, query: Query) -> None:
        for observer in list(query.observers):
            observer._notify()

    def _subscribe(self, observer: "QueryObserver") -> Query:
        query = self._build_query(observer.key, observer.fetcher, observer.policy)
        query.fetcher = observer.fetcher
        query.policy = observer.policy
        query.observers.add(observer)
        query.inactive_since = None
        if query.gc_handle is not None:
            query.gc_handle.cancel()
            query.gc_handle = None

        interval = observer.policy.refetch_interval
        if interval is not None and query.interval_task is None:
            query.interval_task = asyncio.get_running_loop().create_task(self._refetch_every(query, interval))

        if query.is_stale_by(observer.policy.stale_time, self._clock()):
            self._fetch(query)
        return query

    def _unsubscribe(self, observer: "QueryObserver", query: Query) -> None:
        query.observers.discard(observer)
        if query.observers:
            return
        if query.interval_task is not None:
            query.interval_task.cancel()
            query.interval_task = None
        if self._queries.get(query.key) is query:
            self._schedule_gc(query)

    async def _refetch_every(self, query: Query, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            logger.debug("Interval refetch of %s", query.key)
            await asyncio.wait([self._fetch(query)])

    def _schedule_gc(self, query: Query) -> None:
        if query.gc_handle is not None:
            query.gc_handle.cancel()
            query.gc_handle = None
        query.inactive_since = self._clock()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: collect_garbage() still evicts the entry.
            return
        query.gc_handle = loop.call_later(query.policy.gc_time, self._gc_query, query)

    def _gc_query(self, query: Query) -> None:
        query.gc_handle = None
        if query.observers or self._queries.get(query.key) is not query:
            return
        if query.is_fetching:
            self._schedule_gc(query)
            return
        logger.debug("Evicting %s", query.key)
        self._remove(query)

    def _cancel_timers(self, query: Query) -> None:
        if query.gc_handle is not None:
            query.gc_handle.cancel()
            query.gc_handle = None
        if query.interval_task is not None:
            query.interval_task.cancel()
            query.interval_task = None

    def _remove(self, query: Query) -> None:
        self._cancel_timers(query)
        if self._queries.get(query.key) is query:
            del self._queries[query.key]


class QueryObserver:
    """A subscription to one cache entry, the equivalent of a query hook.

    Exposes the entry's current data, loading, error and staleness state,
    and notifies listeners whenever the entry changes.

    Example:
        ```python
        with client.observe(key, fetcher, policy) as observer:
            await observer.settled()
            if observer.is_error:
                ...
            render(observer.data)
        ```
    """

    def __init__(
        self,
        client: QueryClient,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy,
    ) -> None:
        self._client = client
        self.key = key
        self.fetcher = fetcher
        self.policy = policy
        self._query: Query | None = None
        self._listeners: list[Listener] = []
        self._closed = False

    def mount(self) -> None:
        if self._query is None and not self._closed:
            self._query = self._client._subscribe(self)

    @property
    def result(self) -> QueryResult:
        if self._query is None:
            return QueryResult(
                key=self.key,
                data=self.policy.placeholder_data(),
                is_placeholder_data=self.policy.placeholder is not None,
            )
        return self._query.snapshot(self.policy, self._client.now())

    @property
    def data(self) -> Any:
        return self.result.data

    @property
    def error(self) -> BaseException | None:
        return self.result.error

    @property
    def status(self) -> str:
        return self.result.status

    @property
    def is_loading(self) -> bool:
        return self.result.is_loading

    @property
    def is_fetching(self) -> bool:
        return self.result.is_fetching

    @property
    def is_error(self) -> bool:
        return self.result.is_error

    @property
    def is_stale(self) -> bool:
        return self.result.is_stale

    @property
    def is_placeholder_data(self) -> bool:
        return self.result.is_placeholder_data

    @property
    def data_updated_at(self) -> float:
        return self.result.data_updated_at

    @property
    def last_updated(self) -> datetime | None:
        return self.result.last_updated

    @property
    def is_closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new result on every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def refetch(self) -> QueryResult:
        """Fetch now, attaching to any fetch already in flight.

        Errors are recorded on the result rather than raised.
        """
        if self._query is None:
            self.mount()
        if self._query is None:
            raise RuntimeError(f"Observer for {self.key} is closed")
        await asyncio.wait([self._client._fetch(self._query, self.fetcher)])
        return self.result

    async def settled(self) -> QueryResult:
        """Wait for the in-flight fetch, if any, and return the result."""
        task = self._query.task if self._query is not None else None
        if task is not None:
            await asyncio.wait([task])
        return self.result

    def close(self) -> None:
        """Unsubscribe from the entry. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        if self._query is not None:
            self._client._unsubscribe(self, self._query)

    def __enter__(self) -> "QueryObserver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _notify(self) -> None:
        result = self.result
        for listener in list(self._listeners):
            listener(result)
