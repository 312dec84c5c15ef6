"""Public async client entrypoint."""

from __future__ import annotations

from types import TracebackType

from .client_shared import prepare_submission, validate_client_config
from .config import CrptClientConfig
from .core.async_dispatcher import AsyncDispatcher
from .core.async_transport import AsyncTransport
from .core.errors import CrptDispatchClosedError
from .core.models import DispatchStats, RequestEnvelope
from .documents.models import Document


class AsyncCrptClient:
    """Public async CRPT API client."""

    def __init__(
        self,
        *,
        config: CrptClientConfig | None = None,
        transport: AsyncTransport | None = None,
        dispatcher: AsyncDispatcher | None = None,
    ) -> None:
        self._config = config or CrptClientConfig()
        validate_client_config(self._config)

        self._transport = transport or AsyncTransport(self._config)
        self._dispatcher = dispatcher or AsyncDispatcher(
            self._config.rate_limit,
            self._transport.send,
            name="async-crpt-client",
        )
        self._closed = False

    @property
    def dispatcher(self) -> AsyncDispatcher:
        return self._dispatcher

    def _ensure_open(self) -> None:
        if self._closed:
            raise CrptDispatchClosedError("AsyncCrptClient is already closed", cause="closed")

    async def create_document(
        self,
        document: Document,
        signature: str,
        *,
        timeout: float | None = None,
    ) -> None:
        self._ensure_open()
        body = prepare_submission(self._config, document, signature)
        await self._dispatcher.submit(body, signature, timeout=timeout)

    def stats(self) -> DispatchStats:
        return self._dispatcher.stats()

    async def close(self) -> tuple[RequestEnvelope, ...]:
        if self._closed:
            return ()
        self._closed = True
        undelivered = await self._dispatcher.shutdown()
        await self._transport.close()
        return undelivered

    async def __aenter__(self) -> "AsyncCrptClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncCrptClient",
]
