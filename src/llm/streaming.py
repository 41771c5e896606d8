# src/llm/streaming.py - v2
"""Bedrock response-stream decoding and stream plumbing.

boto3 returns a blocking ``EventStream``; events are pulled one at a time
in a worker thread so the event loop is never blocked by the network.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
import logging
from typing import Any, AsyncIterator, Callable, Generic, TypeVar

from bedrockstream.llm.models import StreamCallbacks

logger = logging.getLogger(__name__)
debug_logger = logging.getLogger("bedrockstream.debug")

T = TypeVar("T")

_END = object()
_ITEM = "item"
_ERROR = "error"
_DONE = "done"


# --- Decoding ---


async def iterate_bedrock_chunks(response: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
    """Yield the decoded JSON payload of every ``chunk`` event.

    The event stream is closed on every exit path, which releases the
    underlying HTTP connection.
    """
    body = response["body"]
    try:
        events = iter(body)
        while True:
            event = await asyncio.to_thread(next, events, _END)
            if event is _END:
                break
            payload = (event.get("chunk") or {}).get("bytes")
            if payload:
                yield json.loads(payload)
    finally:
        close = getattr(body, "close", None)
        if close is not None:
            close()


def extract_claude_delta(chunk: dict[str, Any]) -> str | None:
    """Text of a ``content_block_delta`` event; None for every other event."""
    delta = chunk.get("delta")
    if isinstance(delta, dict):
        return delta.get("text")
    return None


def extract_llama_generation(chunk: dict[str, Any]) -> str | None:
    return chunk.get("generation")


async def _fire(hook: Callable[..., Any] | None, *args: Any) -> None:
    if hook is None:
        return
    result = hook(*args)
    if inspect.isawaitable(result):
        await result


async def bedrock_stream(
    response: dict[str, Any],
    extract: Callable[[dict[str, Any]], str | None],
    callbacks: StreamCallbacks | None = None,
) -> AsyncIterator[str]:
    """Turn a Bedrock streaming response into text chunks.

    Args:
        response: Return value of ``invoke_model_with_response_stream``.
        extract: Pulls the text delta out of one decoded chunk.
        callbacks: Optional hooks fired while the stream is consumed.
    """
    aggregated: list[str] = []
    if callbacks:
        await _fire(callbacks.on_start)

    async with contextlib.aclosing(iterate_bedrock_chunks(response)) as chunks:
        async for chunk in chunks:
            text = extract(chunk)
            if not text:
                continue
            aggregated.append(text)
            if callbacks:
                await _fire(callbacks.on_token, text)
                await _fire(callbacks.on_text, text)
            yield text

    if callbacks:
        completion = "".join(aggregated)
        await _fire(callbacks.on_completion, completion)
        await _fire(callbacks.on_final, completion)


# --- Fan-out ---


class StreamInterruptedError(RuntimeError):
    """Raised in tee branches when the shared upstream reader was cancelled."""


class _Broadcast(Generic[T]):
    """One upstream reader feeding an unbounded queue per branch.

    A branch that is read slowly (or never) only grows its own queue; it
    never holds back the others.
    """

    def __init__(self, source: AsyncIterator[T], branches: int) -> None:
        self._source = source
        self._queues: list[asyncio.Queue[tuple[str, Any]]] = [
            asyncio.Queue() for _ in range(branches)
        ]
        self._pump_task: asyncio.Task[None] | None = None

    def _publish(self, kind: str, value: Any) -> None:
        for queue in self._queues:
            queue.put_nowait((kind, value))

    async def _pump(self) -> None:
        try:
            async for item in self._source:
                self._publish(_ITEM, item)
        except Exception as e:
            self._publish(_ERROR, e)
        except BaseException:
            # Cancelled: branches must still terminate
            self._publish(_ERROR, StreamInterruptedError("stream reader cancelled"))
            raise
        else:
            self._publish(_DONE, None)

    async def branch(self, index: int) -> AsyncIterator[T]:
        if self._pump_task is None:
            self._pump_task = asyncio.get_running_loop().create_task(
                self._pump(), name="tee-pump"
            )
        queue = self._queues[index]
        while True:
            kind, value = await queue.get()
            if kind == _DONE:
                return
            if kind == _ERROR:
                raise value
            yield value


def tee_stream(source: AsyncIterator[T], branches: int = 2) -> tuple[AsyncIterator[T], ...]:
    """Split one async stream into independent branches carrying the same items.

    The upstream is read once, starting when any branch is first pulled.
    An upstream exception is re-raised in every branch.
    """
    broadcast: _Broadcast[T] = _Broadcast(source, branches)
    return tuple(broadcast.branch(i) for i in range(branches))


# --- Response / diagnostics ---


class StreamingTextResponse:
    """Text stream handed back to the caller, shaped like an HTTP response."""

    def __init__(
        self,
        stream: AsyncIterator[str],
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._stream = stream
        self.status = status
        self.headers = {"Content-Type": "text/plain; charset=utf-8", **(headers or {})}

    def __aiter__(self) -> AsyncIterator[str]:
        return self._stream.__aiter__()

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """UTF-8 encoded chunks, for writing straight to a response body."""
        async for chunk in self._stream:
            yield chunk.encode("utf-8")

    async def text(self) -> str:
        """Drain the stream and return the full text."""
        return "".join([chunk async for chunk in self._stream])

    async def aclose(self) -> None:
        """Stop reading early and release the upstream connection."""
        aclose = getattr(self._stream, "aclose", None)
        if aclose is not None:
            await aclose()


async def debug_stream(stream: AsyncIterator[str]) -> None:
    """Log every chunk of a stream to the ``bedrockstream.debug`` logger."""
    index = 0
    async for chunk in stream:
        debug_logger.info("[chunk %d]\n%s", index, chunk)
        index += 1


async def _drain_debug(stream: AsyncIterator[str]) -> None:
    try:
        await debug_stream(stream)
    except Exception:
        logger.exception("Debug stream drain failed")


def spawn_debug_drain(
    stream: AsyncIterator[str],
    pending: set[asyncio.Task[None]],
) -> asyncio.Task[None]:
    """Drain ``stream`` through debug_stream in a background task.

    The task is kept in ``pending`` until it finishes. Failures are logged
    and never propagated.
    """
    task = asyncio.get_running_loop().create_task(_drain_debug(stream))
    pending.add(task)
    task.add_done_callback(pending.discard)
    return task
