import asyncio
import contextlib
import logging
import sys
import threading
import time
from typing import Optional, Sequence, Tuple

import numpy as np

from utils import U


class ChannelError(Exception):
    pass


class NoDelaysConfigured(ChannelError):
    pass


class DestinationTooSmall(ChannelError):
    def __init__(self, needed: int, available: int):
        super().__init__(f"destination too small: need {needed} bytes, have {available}")
        self.needed = needed
        self.available = available


class ReadCancelled(ChannelError):
    pass


class _EndOfStream:
    """Returned with every successful read: the receive event is complete."""
    def __repr__(self):
        return "EOF"


EOF = _EndOfStream()


class DelayedChannel:
    """In-memory byte channel whose reads are delayed by a random pick from `delays` (ms).

    Reads never consume: each one returns b"<delay>-" followed by everything
    written so far, together with the EOF sentinel.
    """
    def __init__(self, delays: Sequence[int], thread_safe: bool = False, rng=None):
        self._delays = tuple(delays)
        self._rng = np.random if rng is None else rng
        self._storage = bytearray()
        self._len = 0
        self._lock = threading.Lock() if thread_safe else contextlib.nullcontext()

    @property
    def delays(self) -> Tuple[int, ...]:
        return self._delays

    @property
    def buffer(self) -> bytes:
        with self._lock:
            return bytes(self._storage[:self._len])

    @property
    def capacity(self) -> int:
        return len(self._storage)

    def __len__(self) -> int:
        return self._len

    def __repr__(self):
        return f"DelayedChannel(delays={list(self._delays)}, len={self._len})"

    def write(self, data) -> int:
        # memoryview rejects ints, which bytes() would turn into zero padding
        with memoryview(data) as view:
            data = view.tobytes()
        with self._lock:
            end = self._len + len(data)
            if end > len(self._storage):
                # reallocate to double what's needed
                grown = bytearray(U.grown_capacity(end))
                grown[:self._len] = self._storage[:self._len]
                self._storage = grown
            self._storage[self._len:end] = data
            self._len = end
        logging.debug(f"[WRITE] {len(data)} bytes, len={end}, cap={len(self._storage)}")
        return len(data)

    def read_into(self, dest, cancel: Optional[threading.Event] = None):
        """Blocking read. Returns (n, EOF); raises DestinationTooSmall instead of overrunning dest."""
        delay = self._choose_delay()
        self._wait(delay, cancel)
        return self._copy_out(self._payload(delay), dest)

    def read(self, cancel: Optional[threading.Event] = None) -> bytes:
        """Same delayed read, returned as bytes sized to the payload."""
        delay = self._choose_delay()
        self._wait(delay, cancel)
        return self._payload(delay)

    async def aread_into(self, dest):
        delay = self._choose_delay()
        await asyncio.sleep(U.ms_to_s(delay))
        return self._copy_out(self._payload(delay), dest)

    async def aread(self) -> bytes:
        delay = self._choose_delay()
        await asyncio.sleep(U.ms_to_s(delay))
        return self._payload(delay)

    def print_buffer(self) -> None:
        self._to_stdout(self.buffer)

    def print_bufferln(self) -> None:
        self._to_stdout(self.buffer + b"\n")

    def _to_stdout(self, data: bytes) -> None:
        out = getattr(sys.stdout, "buffer", None)
        if out is None:
            # text-only stdout (e.g. redirect_stdout(io.StringIO())): latin-1 maps bytes 1:1
            sys.stdout.write(data.decode("latin-1"))
            sys.stdout.flush()
            return
        out.write(data)
        out.flush()

    def _choose_delay(self) -> int:
        if not self._delays:
            logging.warning("[READ] no delay values configured")
            raise NoDelaysConfigured("no delay values configured")
        delay = U.pick_delay(self._rng, self._delays)
        logging.debug(f"[DELAY] {delay} ms")
        return delay

    def _wait(self, delay: int, cancel: Optional[threading.Event]) -> None:
        seconds = U.ms_to_s(delay)
        if cancel is None:
            time.sleep(seconds)
        elif cancel.wait(seconds):
            logging.info(f"[READ] cancelled during {delay} ms delay")
            raise ReadCancelled(f"read cancelled during {delay} ms delay")

    def _payload(self, delay: int) -> bytes:
        return U.delay_prefix(delay) + self.buffer

    def _copy_out(self, payload: bytes, dest):
        # views are released before raising so the caller can resize dest
        with memoryview(dest) as raw, raw.cast("B") as view:
            readonly = view.readonly
            available = view.nbytes
            if not readonly and available >= len(payload):
                view[:len(payload)] = payload
        if readonly:
            raise TypeError("destination is read-only")
        if available < len(payload):
            logging.warning(f"[READ] destination too small: need {len(payload)}, have {available}")
            raise DestinationTooSmall(len(payload), available)
        logging.debug(f"[READ] {len(payload)} bytes")
        return len(payload), EOF
