"""Incremental consumption of a streamed assistant reply."""

import logging
from collections.abc import AsyncIterator, Callable

from chat_client.session.errors import ChatClientError, TransportError

logger = logging.getLogger(__name__)


class StreamIngestor:
    """Turn a stream of text fragments into render callbacks.

    Fragments are opaque: they are concatenated in arrival order with no
    reordering, splitting or deduplication. ``on_update`` receives the
    accumulated text after every fragment, then exactly one of
    ``on_complete`` (stream ended) or ``on_error`` (stream failed) fires.

    Once :meth:`abandon` is called no callback fires again. The read loop
    stops at its next resumption and closes the fragment iterator.

    Args:
        fragments: Finite async iterator of reply fragments.
        on_update: Called with the accumulated text after each fragment.
        on_complete: Called with the full text when the stream ends.
        on_error: Called with the failure when the stream breaks.
    """

    def __init__(
        self,
        fragments: AsyncIterator[str],
        on_update: Callable[[str], None],
        on_complete: Callable[[str], None],
        on_error: Callable[[ChatClientError], None],
    ) -> None:
        self._fragments = fragments
        self._on_update = on_update
        self._on_complete = on_complete
        self._on_error = on_error
        self._text = ""
        self._started = False
        self._abandoned = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def abandon(self) -> None:
        """Stop emitting callbacks; late fragments are dropped."""
        self._abandoned = True

    async def run(self) -> None:
        """Consume the stream until it ends, fails, or is abandoned.

        Raises:
            RuntimeError: If the ingestor has already been run.
        """
        if self._started:
            raise RuntimeError("StreamIngestor can only be run once")
        self._started = True

        try:
            while True:
                # Only failures of the stream itself count as stream errors;
                # callback exceptions propagate to the caller
                try:
                    fragment = await anext(self._fragments)
                except StopAsyncIteration:
                    break
                except ChatClientError as e:
                    self._fail(e)
                    return
                except Exception:
                    logger.exception("Stream failed with an unexpected error")
                    self._fail(TransportError())
                    return

                if self._abandoned:
                    break
                if not fragment:
                    continue
                self._text += fragment
                self._on_update(self._text)
        finally:
            await self._close()

        if self._abandoned:
            logger.debug(f"Dropped orphaned stream after {len(self._text)} chars")
            return
        self._on_complete(self._text)

    def _fail(self, error: ChatClientError) -> None:
        if self._abandoned:
            logger.debug(f"Suppressed error from orphaned stream: {error.message}")
            return
        self._on_error(error)

    async def _close(self) -> None:
        aclose = getattr(self._fragments, "aclose", None)
        if aclose is not None:
            await aclose()
