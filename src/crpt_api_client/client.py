"""Public client entrypoint."""

from __future__ import annotations

from types import TracebackType

from .client_shared import prepare_submission, validate_client_config
from .config import CrptClientConfig
from .core.dispatcher import Dispatcher
from .core.errors import CrptDispatchClosedError
from .core.models import DispatchStats, RequestEnvelope
from .core.transport import SyncTransport
from .documents.models import Document


class CrptClient:
    """Public CRPT API client.

    ``create_document`` returns once the request is queued. Requests leave at
    most ``config.rate_limit.request_limit`` per ``window_seconds``.
    """

    def __init__(
        self,
        *,
        config: CrptClientConfig | None = None,
        transport: SyncTransport | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self._config = config or CrptClientConfig()
        validate_client_config(self._config)

        self._transport = transport or SyncTransport(self._config)
        self._dispatcher = dispatcher or Dispatcher(
            self._config.rate_limit,
            self._transport.send,
            name="crpt-client",
        )
        self._closed = False

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def _ensure_open(self) -> None:
        if self._closed:
            raise CrptDispatchClosedError("CrptClient is already closed", cause="closed")

    def create_document(
        self,
        document: Document,
        signature: str,
        *,
        timeout: float | None = None,
    ) -> None:
        self._ensure_open()
        body = prepare_submission(self._config, document, signature)
        self._dispatcher.submit(body, signature, timeout=timeout)

    def stats(self) -> DispatchStats:
        return self._dispatcher.stats()

    def close(self) -> tuple[RequestEnvelope, ...]:
        """Shut down dispatching and the transport; returns unsent envelopes."""

        if self._closed:
            return ()
        self._closed = True
        undelivered = self._dispatcher.shutdown()
        self._transport.close()
        return undelivered

    def __enter__(self) -> "CrptClient":
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close()
        return False


__all__ = [
    "CrptClient",
]
