"""Main scrape orchestration: listing -> detail pages -> hotel records"""

import asyncio
import logging
import time
from typing import Callable, Awaitable, List

from config import PACING_DELAY_SECONDS, MAX_CANDIDATE_INDEX
from models import HotelRecord
from .fetcher import RetryableFetcher
from .sources import HotelSource, DetailTarget

logger = logging.getLogger(__name__)


class ExtractionOrchestrator:
    """
    Runs one scrape of a hotel source.

    Process:
    1. Open the fetcher session (closed again however the run ends)
    2. Fetch the listing page; give up with no records if that fails
    3. Let the source turn the listing into detail targets
    4. Fetch and extract each target in order, pacing between them
    5. Stop once the candidate at position max_candidate_index is handled

    A candidate whose fetch fails is logged and skipped; partial results are
    the normal outcome.
    """

    def __init__(
        self,
        fetcher: RetryableFetcher,
        pacing_delay: float = PACING_DELAY_SECONDS,
        max_candidate_index: int = MAX_CANDIDATE_INDEX,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.pacing_delay = pacing_delay
        self.max_candidate_index = max_candidate_index
        self._sleep = sleep

    async def run(self, source: HotelSource) -> List[HotelRecord]:
        start_time = time.time()
        logger.info(f"Starting {source.name} run: {source.listing_url}")

        try:
            async with self.fetcher:
                records = await self._collect(source)
        except Exception as e:
            logger.exception(f"Run aborted for {source.listing_url}: {e}")
            return []

        elapsed = time.time() - start_time
        logger.info(f"Finished {source.name} run: {len(records)} records in {elapsed:.1f}s")
        return records

    async def _collect(self, source: HotelSource) -> List[HotelRecord]:
        listing = await self.fetcher.fetch(source.listing_url, readiness=source.readiness)
        if listing is None:
            logger.error(f"Could not fetch listing page {source.listing_url}; no hotels to process")
            return []

        targets = source.detail_targets(listing)
        logger.info(f"Found {len(targets)} candidates on {source.listing_url}")

        records: List[HotelRecord] = []
        failures = 0
        processed = 0

        for position, target in enumerate(targets):
            if position > 0:
                await self._sleep(self.pacing_delay)

            processed += 1
            ok = await self._process(source, position, target, records)
            if not ok:
                failures += 1

            if position >= self.max_candidate_index:
                logger.info(f"Processing cap reached at candidate {position}; stopping")
                break

        logger.info(
            f"Processed {processed}/{len(targets)} candidates: "
            f"{len(records)} records, {failures} failures"
        )
        return records

    async def _process(
        self,
        source: HotelSource,
        position: int,
        target: DetailTarget,
        records: List[HotelRecord],
    ) -> bool:
        label = f"candidate {position}"
        if target.candidate is not None:
            label += f" [{target.candidate.index}] {target.candidate.name}"

        try:
            document = await self.fetcher.fetch(target.url)
        except Exception as e:
            logger.exception(f"Failed to fetch {label} ({target.url}): {e}")
            return False

        if document is None:
            logger.warning(f"Failed to fetch {label} ({target.url})")
            return False

        try:
            fields = source.extractor.extract(document)
            record = source.build_record(target, fields)
        except Exception as e:
            logger.exception(f"Extraction failed for {label} ({target.url}): {e}")
            return False

        records.append(record)
        logger.info(f"Extracted {label}: address={record.address!r}, phone={record.phone!r}")
        return True
