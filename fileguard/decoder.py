"""
Decoder for the inotify read buffer.

A read from the notification channel returns a run of variable-length
records, each a fixed header (wd, mask, cookie, len) followed by ``len``
bytes of NUL-padded name. The decoder walks the valid region of the buffer
once, checking every declared length against the bytes actually read before
producing a record.
"""

import os
import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from fileguard.errors import DecodeError

EVENT_HEADER = struct.Struct("iIII")  # wd, mask, cookie, len
RECORD_ALIGNMENT = 4  # alignment of struct inotify_event
NAME_MAX = 255


@dataclass(frozen=True)
class RawEventRecord:
    """A single event record, with its name viewed in place in the read buffer."""

    wd: int
    mask: int
    cookie: int
    length: int
    raw_name: memoryview

    @property
    def name(self) -> str:
        """The entry name, empty when the event concerns the watched path itself."""
        return os.fsdecode(bytes(self.raw_name).rstrip(b"\x00"))


def _align(size: int) -> int:
    return (size + RECORD_ALIGNMENT - 1) & ~(RECORD_ALIGNMENT - 1)


def decode_events(
    buffer: Union[bytes, bytearray, memoryview], n: Optional[int] = None
) -> Iterator[RawEventRecord]:
    """
    Lazily decode the records held in the first ``n`` bytes of ``buffer``.

    Args:
        buffer: The read buffer. May be larger than the data actually read.
        n: Number of valid bytes at the start of the buffer. Defaults to the
            whole buffer.

    Yields:
        RawEventRecord objects in buffer order.

    Raises:
        DecodeError: If ``n`` is out of range, or a header, a name or the
            record padding would run past ``n``. Records before the faulty
            one have already been yielded.
    """
    view = memoryview(buffer)
    if n is None:
        n = len(view)
    if n < 0 or n > len(view):
        raise DecodeError(f"Valid length {n} outside buffer of {len(view)} bytes")

    cursor = 0
    while cursor < n:
        if cursor + EVENT_HEADER.size > n:
            raise DecodeError(
                f"Truncated header at offset {cursor}: "
                f"{n - cursor} bytes left, {EVENT_HEADER.size} needed"
            )
        wd, mask, cookie, length = EVENT_HEADER.unpack_from(view, cursor)

        name_start = cursor + EVENT_HEADER.size
        name_end = name_start + length
        if name_end > n:
            raise DecodeError(
                f"Record at offset {cursor} declares a {length} byte name, "
                f"only {n - name_start} bytes left"
            )

        next_cursor = cursor + _align(EVENT_HEADER.size + length)
        if next_cursor > n:
            raise DecodeError(
                f"Record at offset {cursor} is missing its alignment padding"
            )

        yield RawEventRecord(wd, mask, cookie, length, view[name_start:name_end])
        cursor = next_cursor
