"""Server wiring — settings in, running stdio server out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from toolwire.config import ServerSettings, SettingsLoader
from toolwire.protocol.dispatcher import Dispatcher
from toolwire.protocol.server import Concurrency, Server
from toolwire.protocol.transport import StdioTransport
from toolwire.tools.catalog import build_registry
from toolwire.utils.telemetry import configure_telemetry

if TYPE_CHECKING:
    from toolwire.protocol.transport import LineTransport

logger = logging.getLogger(__name__)


class ServerRunner:
    """Build the registry, dispatcher and transport loop from :class:`ServerSettings`."""

    def __init__(self, settings: ServerSettings, *, transport: LineTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides: Any) -> ServerRunner:
        """Load a settings YAML and return a ready-to-run runner."""
        return cls(SettingsLoader(Path(path)).load(**overrides))

    def build_dispatcher(self) -> Dispatcher:
        """Build the frozen registry and a dispatcher over it."""
        registry = build_registry(self.settings.providers)
        return Dispatcher(
            registry,
            server_info=self.settings.server_info(),
            provider_config=self.settings.provider_config(),
            invoke_timeout=self.settings.invoke_timeout,
        )

    async def run(self) -> None:
        """Serve until the input stream closes."""
        if self.settings.telemetry and self.settings.telemetry.enabled:
            configure_telemetry(
                service_name=self.settings.name,
                otlp_endpoint=self.settings.telemetry.otlp_endpoint,
            )

        dispatcher = self.build_dispatcher()
        server = Server(
            dispatcher,
            self._transport or StdioTransport(),
            concurrency=Concurrency(self.settings.concurrency),
        )
        logger.info(
            "Starting %s %s (region %s)",
            self.settings.name,
            self.settings.version,
            self.settings.default_region,
        )
        await server.serve()
