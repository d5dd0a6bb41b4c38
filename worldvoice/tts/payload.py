"""
SpeechAudio: the three shapes synthesized speech can arrive in.

Engines pick the variant once, when they return; callers only ever call
drain(), which collects the whole payload into one buffer before transcoding.

- BufferedSpeech: bytes already in memory.
- PulledSpeech:   an (async) iterable of chunks the consumer pulls from.
- PushedSpeech:   the producer pushes chunks with feed()/end()/fail().
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterable, Iterable, Union


class SpeechAudio(ABC):
    """Synthesized speech payload; drain() returns all bytes or raises the producer's error."""

    @abstractmethod
    async def drain(self) -> bytes:
        ...


@dataclass
class BufferedSpeech(SpeechAudio):
    data: bytes

    async def drain(self) -> bytes:
        return bytes(self.data)


@dataclass
class PulledSpeech(SpeechAudio):
    chunks: Union[AsyncIterable[bytes], Iterable[bytes]]

    async def drain(self) -> bytes:
        parts: list[bytes] = []
        if hasattr(self.chunks, "__aiter__"):
            async for chunk in self.chunks:
                if chunk:
                    parts.append(bytes(chunk))
        else:
            for chunk in self.chunks:
                if chunk:
                    parts.append(bytes(chunk))
        return b"".join(parts)


_END = object()


class PushedSpeech(SpeechAudio):
    """
    Push-based stream. The producer calls feed() per chunk, then end() or
    fail(exc). drain() waits until one of those and can be called once.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def feed(self, chunk: bytes) -> None:
        if self._closed:
            raise RuntimeError("feed() after end()/fail()")
        if chunk:
            self._queue.put_nowait(bytes(chunk))

    def end(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_END)

    def fail(self, exc: BaseException) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(exc)

    async def drain(self) -> bytes:
        parts: list[bytes] = []
        while True:
            item = await self._queue.get()
            if item is _END:
                return b"".join(parts)
            if isinstance(item, BaseException):
                raise item
            parts.append(item)
