"""
Generic crawl pipeline.

For each group a strategy yields: fetch the listing, discover items, then
fetch, extract and persist every item with bounded concurrency. A failed item
is logged with its family and identifier and skipped; the run goes on. Each
group's outcome is written to the progress ledger.
"""

import asyncio
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from tqdm.asyncio import tqdm_asyncio

from ..citations import CitationError
from ..config import Settings, get_settings
from ..models import CrawlStatus, Family
from ..parsers import ExtractionError, is_near_empty
from ..sources import FetchError, SourceClient
from ..storage import DocumentStore, StoreConstraintError
from .families import CrawlGroup, CrawlItem, FamilyStrategy

logger = logging.getLogger(__name__)

# Failures recovered per item (and per group listing)
ITEM_ERRORS = (FetchError, ExtractionError, CitationError, StoreConstraintError, sqlite3.Error)

# Identifier used in the progress ledger for a family's top-level index
INDEX_UNIT = "index"


@dataclass
class CrawlReport:
    """Outcome counters for one family run."""
    family: Family
    groups: int = 0
    groups_failed: int = 0
    stored: int = 0
    failed: int = 0
    warnings: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.stored + self.failed

    def to_dict(self) -> dict:
        return {
            "family": self.family.value,
            "groups": self.groups,
            "groups_failed": self.groups_failed,
            "stored": self.stored,
            "failed": self.failed,
            "warnings": self.warnings,
        }


class CrawlOrchestrator:
    """
    Drives discovery -> fetch -> extract -> persist for one family at a time.

    The orchestrator is the only writer of the store during a crawl.
    """

    def __init__(
        self,
        store: DocumentStore,
        client: SourceClient,
        settings: Optional[Settings] = None,
        show_progress: bool = False,
    ):
        self.store = store
        self.client = client
        self.settings = settings or get_settings()
        self.show_progress = show_progress
        self._slots = asyncio.Semaphore(self.settings.max_concurrency)

    async def run(self, strategy: FamilyStrategy, limit: Optional[int] = None) -> CrawlReport:
        """Crawl one family.

        Args:
            strategy: Family strategy (statute or rule sets)
            limit: Stop after this many items have been attempted

        Returns:
            CrawlReport with counters for the run
        """
        family = strategy.family
        report = CrawlReport(family=family)
        logger.info(f"[CRAWL] Starting {family.value} crawl")

        groups = strategy.groups(self.client)
        try:
            async for group in groups:
                if limit is not None and report.attempted >= limit:
                    break
                remaining = None if limit is None else limit - report.attempted
                await self._run_group(strategy, group, report, remaining)
        except (FetchError, ExtractionError, CitationError) as e:
            # The family index itself could not be read
            logger.error(f"[CRAWL] {family.value} index: {type(e).__name__}: {e}")
            self.store.record_progress(family, INDEX_UNIT, CrawlStatus.ERROR, str(e))
            report.errors.append(str(e))
        finally:
            await groups.aclose()

        logger.info(
            f"[CRAWL] Finished {family.value}: {report.stored} stored, {report.failed} failed, "
            f"{report.groups} groups ({report.groups_failed} failed), {report.warnings} warnings"
        )
        return report

    async def _run_group(
        self,
        strategy: FamilyStrategy,
        group: CrawlGroup,
        report: CrawlReport,
        limit: Optional[int],
    ) -> None:
        family = strategy.family
        report.groups += 1

        if group.error:
            logger.error(f"[CRAWL] {family.value} {group.unit}: {group.error}")
            self.store.record_progress(family, group.unit, CrawlStatus.ERROR, group.error)
            report.groups_failed += 1
            report.errors.append(f"{group.unit}: {group.error}")
            return

        self.store.record_progress(family, group.unit, CrawlStatus.PENDING)
        try:
            listing = await self.client.fetch_text(group.listing_url)
            items = strategy.discover(listing, group)
        except (FetchError, CitationError) as e:
            logger.error(f"[CRAWL] {family.value} {group.unit}: listing failed: {e}")
            self.store.record_progress(family, group.unit, CrawlStatus.ERROR, str(e))
            report.groups_failed += 1
            report.errors.append(f"{group.unit}: {e}")
            return
        finally:
            await asyncio.sleep(self.settings.request_delay_s)

        if limit is not None:
            items = items[:limit]
        logger.info(f"[CRAWL] {family.value} {group.unit}: {len(items)} items")

        results = await tqdm_asyncio.gather(
            *(self._run_item(strategy, item, report) for item in items),
            desc=f"{family.value} {group.unit}",
            disable=not self.show_progress,
            leave=False,
        )
        succeeded = sum(1 for ok in results if ok)
        failed = len(items) - succeeded

        if items and succeeded == 0:
            message = f"all {failed} items failed"
            self.store.record_progress(family, group.unit, CrawlStatus.ERROR, message)
            report.groups_failed += 1
        else:
            message = f"{failed} of {len(items)} items failed" if failed else None
            self.store.record_progress(family, group.unit, CrawlStatus.COMPLETED, message)

    async def _run_item(self, strategy: FamilyStrategy, item: CrawlItem, report: CrawlReport) -> bool:
        """Fetch, extract and persist one item; False if it failed."""
        family = strategy.family
        async with self._slots:
            try:
                if item.format == "pdf":
                    payload = await self.client.fetch_binary(item.url)
                else:
                    payload = await self.client.fetch_text(item.url)

                record = strategy.extract(item, payload)
                if is_near_empty(record.full_text, self.settings.min_text_length):
                    logger.warning(
                        f"[EXTRACT] {family.value} {item.key}: very little content "
                        f"({len(record.full_text)} chars)"
                    )
                    report.warnings += 1

                strategy.persist(self.store, record)
                report.stored += 1
                logger.debug(f"[CRAWL] Saved {family.value} {item.key}")
                return True
            except ITEM_ERRORS as e:
                logger.error(f"[CRAWL] {family.value} {item.key}: {type(e).__name__}: {e}")
                report.failed += 1
                report.errors.append(f"{item.key}: {e}")
                return False
            finally:
                # Courtesy delay per detail page, held inside the slot
                await asyncio.sleep(self.settings.request_delay_s)
