"""Lifecycle management for long-lived engine components.

Starts components in registration order and stops them in reverse order.
Components may implement their hooks as plain or async methods.

Example:
    >>> lm = LifecycleManager()
    >>> lm.register("alias_refresher", refresher)
    >>> await lm.startup()
    >>> # ... application runs ...
    >>> await lm.shutdown()
"""

import inspect
import logging
from typing import Any

logger = logging.getLogger(__name__)


async def _call(hook: Any) -> None:
    result = hook()
    if inspect.isawaitable(result):
        await result


class LifecycleManager:
    """Manages startup and shutdown of the engine's components."""

    def __init__(self) -> None:
        self._components: list[tuple[str, Any]] = []
        self._started = False

    def register(self, name: str, component: Any) -> None:
        """Register a component with start()/startup() and/or shutdown()/aclose()."""
        self._components.append((name, component))
        logger.debug("Registered lifecycle component: %s", name)

    async def startup(self) -> None:
        """Start all registered components in order.

        Skips if already started. Components can implement either
        start() or startup() methods; components with neither are skipped.
        """
        if self._started:
            logger.debug("Lifecycle manager already started")
            return

        for name, component in self._components:
            if hasattr(component, "start"):
                logger.info("Starting %s", name)
                await _call(component.start)
            elif hasattr(component, "startup"):
                logger.info("Starting %s", name)
                await _call(component.startup)

        self._started = True
        logger.info(
            "All lifecycle components started (%d total)", len(self._components)
        )

    async def shutdown(self) -> None:
        """Shutdown all registered components in reverse order.

        Errors from one component are logged and do not stop the others.
        """
        if not self._started:
            logger.debug("Lifecycle manager not started, skipping shutdown")
            return

        for name, component in reversed(self._components):
            logger.info("Stopping %s", name)
            try:
                if hasattr(component, "shutdown"):
                    await _call(component.shutdown)
                elif hasattr(component, "aclose"):
                    await _call(component.aclose)
            except Exception as e:
                logger.error("Error shutting down %s: %s", name, e)

        self._started = False
        logger.info("All lifecycle components stopped")

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def component_count(self) -> int:
        return len(self._components)
