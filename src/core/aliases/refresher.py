# src/core/aliases/refresher.py
"""Periodic reload of action aliases from StackStorm.

Uses an APScheduler AsyncIOScheduler so reloads run on the same event loop
as the chat adapter and the webhook server. A failed reload keeps the
previously installed registry snapshot.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from src.core.aliases.client import St2Client
from src.core.aliases.errors import AliasDefinitionError, RemoteServiceError
from src.core.aliases.models import AliasDefinition
from src.core.aliases.registry import CommandRegistry

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "reload_aliases"
DEFAULT_RELOAD_INTERVAL = 120


class RegistryRefresher:
    """Reloads the command registry once at startup and then on an interval.

    Overlapping reloads are allowed: a slow fetch does not stop the next
    tick from running, and whichever reload finishes last installs its
    snapshot.

    Attributes:
        client: StackStorm API client.
        registry: Registry receiving new snapshots.
        interval: Seconds between reloads.
    """

    def __init__(
        self,
        client: St2Client,
        registry: CommandRegistry,
        interval: int = DEFAULT_RELOAD_INTERVAL,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self.client = client
        self.registry = registry
        self.interval = interval
        self._scheduler = scheduler or AsyncIOScheduler(
            job_defaults={
                "coalesce": False,  # Every tick fetches
                "max_instances": 3,  # Ticks may overlap a slow fetch
                "misfire_grace_time": 30,
            },
        )

    async def refresh(self) -> bool:
        """Fetch aliases and install a new registry snapshot.

        Returns:
            True if a new snapshot was installed, False if the fetch failed
            and the previous snapshot was kept.
        """
        logger.info("Loading commands....")

        try:
            entries = await self.client.list_aliases()
        except RemoteServiceError as e:
            logger.error("%s", e)
            return False

        aliases = []
        for entry in entries:
            try:
                aliases.append(AliasDefinition.from_dict(entry))
            except AliasDefinitionError as e:
                logger.error("%s", e)

        self.registry.replace(aliases)
        return True

    def start(self) -> None:
        """Schedule periodic reloads. Must be called with a running event loop."""
        if self._scheduler.running:
            return

        self._scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self.interval,
            id=REFRESH_JOB_ID,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Alias reload scheduled every %d seconds", self.interval)

    def shutdown(self, wait: bool = False) -> None:
        """Stop periodic reloads.

        Args:
            wait: Whether to wait for a running reload to finish.
        """
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Alias reload stopped")

    @property
    def running(self) -> bool:
        return self._scheduler.running
