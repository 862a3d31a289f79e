"""Example usage of the site_batch package.

Shows a batch against real sites over HTTP, a dry run, and a fully mocked
batch with scripted throttling that runs without network access.
"""

import asyncio
import logging

import httpx

from site_batch import (
    CleanupJobSpec,
    CreateCleanupJob,
    GetPolicy,
    MetricsObserver,
    RetryConfig,
    RunnerConfig,
    SetPolicy,
    SiteBatchOrchestrator,
    ThrottledError,
    VersionPolicy,
)
from site_batch.classifiers import HttpErrorClassifier
from site_batch.clients import ClientCredentials, RestSessionFactory
from site_batch.testing import MockSessionFactory

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

SITES = [
    "https://contoso.example/sites/finance",
    "https://contoso.example/sites/legal",
    "https://contoso.example/sites/engineering",
]


async def example_http():
    """
    Example 1: Apply a version policy to real sites.
    """
    logging.info("\n" + "=" * 80)
    logging.info("EXAMPLE 1: Set a version policy over HTTP")
    logging.info("=" * 80)

    credentials = ClientCredentials(
        client_id="00000000-0000-0000-0000-000000000000",
        tenant="contoso",
        access_token="replace-me",
    )
    policy = VersionPolicy(auto_expiration=False, major_version_limit=100, expire_after_days=365)

    async with httpx.AsyncClient(timeout=60.0) as client:
        orchestrator = SiteBatchOrchestrator(
            RestSessionFactory(client, credentials),
            config=RunnerConfig(retry=RetryConfig(max_attempts=5, initial_wait=30.0)),
            error_classifier=HttpErrorClassifier(),
        )
        result = await orchestrator.run_batch(SITES, SetPolicy(policy))

    for outcome in result.outcomes:
        if outcome.success:
            logging.info(f"  ✓ {outcome.target}: {outcome.output}")
        else:
            logging.error(f"  ✗ {outcome.target}: {outcome.error}")


async def example_dry_run():
    """
    Example 2: Dry run. Sessions are opened, nothing is changed.
    """
    logging.info("\n" + "=" * 80)
    logging.info("EXAMPLE 2: Dry run of a cleanup job")
    logging.info("=" * 80)

    factory = MockSessionFactory()
    orchestrator = SiteBatchOrchestrator(factory, config=RunnerConfig(dry_run=True))
    job = CleanupJobSpec(mode="delete_older_than_days", delete_before_days=180)

    result = await orchestrator.run_batch(SITES, CreateCleanupJob(job))

    for outcome in result.outcomes:
        logging.info(f"  {outcome.target}: would send {outcome.output['job']}")


async def example_testing_with_mocks():
    """
    Example 3: Scripted throttling against mock sessions (no network calls).
    """
    logging.info("\n" + "=" * 80)
    logging.info("EXAMPLE 3: Testing with MockSessionFactory")
    logging.info("=" * 80)

    # finance is throttled twice, legal cannot be reached, engineering fails outright
    factory = MockSessionFactory(
        scripts={
            SITES[0]: [ThrottledError("429 Too Many Requests", retry_after=0.2)] * 2,
            SITES[2]: [PermissionError("access denied")],
        },
        fail_targets={SITES[1]: None},
    )

    config = RunnerConfig(
        retry=RetryConfig(
            max_attempts=3,
            initial_wait=0.1,  # Short waits for the demo
        ),
    )
    metrics = MetricsObserver()

    orchestrator = SiteBatchOrchestrator(factory, config=config, observers=[metrics])
    result = await orchestrator.run_batch(SITES, GetPolicy())

    logging.info(f"\nProcessed {result.total_targets} targets:")
    logging.info(f"  Succeeded: {result.succeeded}")
    logging.info(f"  Failed: {result.failed}")
    for status, count in result.by_status().items():
        logging.info(f"  {status.value}: {count}")

    collected_metrics = await metrics.get_metrics()
    logging.info("\nMetrics from Observer:")
    logging.info(f"  Throttles hit: {collected_metrics['throttles_hit']}")
    logging.info(f"  Backoff time: {collected_metrics['total_backoff_time']:.1f}s")
    logging.info(f"  Success rate: {collected_metrics['success_rate']*100:.1f}%")


async def main():
    """Run all examples."""
    # Example 1 needs reachable sites and a valid token
    # await example_http()

    await example_dry_run()
    await example_testing_with_mocks()


if __name__ == "__main__":
    asyncio.run(main())
