# src/core/engine.py
"""Alias engine wiring and startup sequence.

ChatOpsEngine owns one instance of each alias component and is passed to
the chat adapter and the webhook app. Startup takes one of two paths,
chosen once from the configured credentials: authenticate then start, or
start directly. A failed authentication is fatal.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from src.config import Settings
from src.core.aliases.client import St2Client
from src.core.aliases.dispatcher import Dispatcher, ReplyCallback
from src.core.aliases.errors import AuthenticationError
from src.core.aliases.models import ChatMessage, DispatchResult
from src.core.aliases.notifier import InboundNotifier
from src.core.aliases.refresher import RegistryRefresher
from src.core.aliases.registry import CommandRegistry
from src.core.aliases.resolver import Resolver
from src.core.lifecycle import LifecycleManager

logger = logging.getLogger(__name__)


def requires_authentication(settings: Settings) -> bool:
    """Whether startup must obtain an auth token before serving commands."""
    return settings.has_credentials


class ChatOpsEngine:
    """Command alias matching and dispatch engine.

    Attributes:
        settings: Application settings.
        client: StackStorm API client.
        registry: Current command registry.
        resolver: Text to alias resolver.
        dispatcher: Execution dispatcher.
        notifier: Result webhook parser.
        refresher: Periodic alias reloader.

    Example:
        >>> engine = ChatOpsEngine(settings)
        >>> await engine.start()
        >>> await engine.handle_command("deploy web to prod", "alice", "#ops", say)
        >>> await engine.shutdown()
    """

    def __init__(
        self,
        settings: Settings,
        client: St2Client | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self.settings = settings
        self.client = client or St2Client(
            settings.st2_api,
            auth_url=settings.auth_url,
            timeout=settings.st2_request_timeout,
            verify=settings.st2_verify_ssl,
        )
        self.registry = CommandRegistry()
        self.resolver = Resolver(self.registry)
        self.dispatcher = Dispatcher(self.client, settings.st2_channel)
        self.notifier = InboundNotifier(default_channel=settings.st2_channel)
        self.refresher = RegistryRefresher(
            self.client,
            self.registry,
            interval=settings.st2_commands_reload_interval,
            scheduler=scheduler,
        )

        self._lifecycle = LifecycleManager()
        self._lifecycle.register("st2_client", self.client)
        self._lifecycle.register("alias_refresher", self.refresher)

    async def start(self) -> None:
        """Run the startup sequence.

        Raises:
            AuthenticationError: If credentials are configured and no token
                could be obtained.
        """
        if requires_authentication(self.settings):
            await self._authenticate_then_start()
        else:
            await self._start()

    async def _authenticate_then_start(self) -> None:
        logger.info("Performing authentication...")
        try:
            await self.client.authenticate(
                self.settings.st2_auth_username, self.settings.st2_auth_password
            )
        except AuthenticationError as e:
            logger.error("Failed to authenticate: %s", e)
            raise
        await self._start()

    async def _start(self) -> None:
        await self.refresher.refresh()
        await self._lifecycle.startup()

    async def shutdown(self) -> None:
        await self._lifecycle.shutdown()

    async def handle_command(
        self,
        text: str,
        sender: str,
        source_channel: str,
        reply: ReplyCallback | None = None,
    ) -> DispatchResult | None:
        """Resolve a chat line and dispatch it if it names an alias.

        Args:
            text: Command text addressed to the bot, mention removed.
            sender: Chat user name or ID.
            source_channel: Channel the text was posted in.
            reply: Callback posting a message back to the source channel.

        Returns:
            DispatchResult, or None when the text matches no alias.
        """
        match = self.resolver.resolve(text)
        if match is None:
            return None
        return await self.dispatcher.dispatch(match, sender, source_channel, reply)

    def handle_result(self, raw: object) -> ChatMessage:
        """Parse a result callback into a chat message (see InboundNotifier)."""
        return self.notifier.handle(raw)
