#!/usr/bin/env python3
"""
Demo script for the dashboard query cache.

This script walks through cold loads, cache hits, request de-duplication,
the composed overview and invalidation against the dashboard backend
configured by DASHBOARD_API_URL.
"""

import asyncio
import time

from dashboard_cache import DashboardService, HttpDashboardRepository, InMemoryNotifier, QueryClient
from dashboard_cache.keys import dashboard_keys


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cold_and_warm_reads(service: DashboardService) -> None:
    """Demonstrate a cold load followed by a cache hit."""
    print_section("Cold and Warm Reads")

    start = time.perf_counter()
    with service.get_stats() as observer:
        print(f"\n  Loading: {observer.is_loading}")
        result = await observer.settled()
    cold_ms = (time.perf_counter() - start) * 1000

    if result.is_error:
        raise result.error

    print(f"  Total projects: {result.data.total_projects}")
    print(f"  Average score:  {result.data.average_score}")
    print(f"  ⏱  Cold read: {cold_ms:.1f}ms")

    start = time.perf_counter()
    with service.get_stats() as observer:
        print(f"  Fetching on warm read: {observer.is_fetching}")
    warm_ms = (time.perf_counter() - start) * 1000
    print(f"  ⏱  Warm read: {warm_ms:.2f}ms")


async def demo_deduplication(client: QueryClient, source: HttpDashboardRepository) -> None:
    """Demonstrate that concurrent reads share one request."""
    print_section("Request De-duplication")

    key = dashboard_keys.issue_trends(14)
    calls = 0

    async def fetcher():
        nonlocal calls
        calls += 1
        return await source.get_issue_trends(14)

    results = await asyncio.gather(*(client.fetch_query(key, fetcher) for _ in range(5)))
    print(f"\n  5 concurrent reads, {calls} backend call(s)")
    print(f"  Points returned: {len(results[0])}")


async def demo_overview(service: DashboardService) -> None:
    """Demonstrate the composed dashboard view."""
    print_section("Dashboard Overview")

    await service.prefetch_all()
    with service.get_overview() as overview:
        await overview.settled()
        print(f"\n  Loading: {overview.is_loading}")
        print(f"  Error:   {overview.error_message or '-'}")
        print(f"  Stale:   {overview.is_stale}")
        print(f"  Updated: {overview.last_updated}")
        print(f"  Recent projects: {len(overview.recent_projects or [])}")
        print(f"  Priority issues: {len(overview.priority_issues or [])}")
        print(f"  Trend points:    {len(overview.performance_trends or [])}")


async def demo_invalidation(service: DashboardService, notifier: InMemoryNotifier) -> None:
    """Demonstrate the cache invalidation mutation."""
    print_section("Cache Invalidation")

    before = service.get_cache_stats()
    print(f"\n  Before: {before.total_queries} queries, {before.stale_queries} stale")

    result = await service.invalidate_cache()
    after = service.get_cache_stats()
    print(f"  Mutation: {result.status}")
    print(f"  After:  {after.total_queries} queries, {after.stale_queries} stale")

    if notifier.last is not None:
        icon = "❌" if notifier.last.is_destructive else "✓"
        print(f"  {icon} {notifier.last.title}: {notifier.last.description}")


async def run() -> None:
    source = HttpDashboardRepository.create()
    client = QueryClient()
    notifier = InMemoryNotifier()
    service = DashboardService.create(client=client, source=source, notifier=notifier)

    try:
        await demo_cold_and_warm_reads(service)
        await demo_deduplication(client, source)
        await demo_overview(service)
        await demo_invalidation(service, notifier)
    finally:
        client.clear()
        await source.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 Dashboard Cache Demo")
    print("=" * 70)
    print("This demo showcases cached, de-duplicated dashboard queries")

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nMake sure the dashboard backend is running, or set")
        print("DASHBOARD_API_URL to your backend instance.")


if __name__ == "__main__":
    main()
