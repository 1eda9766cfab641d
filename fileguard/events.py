"""
Event vocabulary for FileGuard.

Holds the inotify bit constants and the closed set of canonical events a
record can be classified into. Classification picks the first canonical
event, in declaration order, whose bit is set in the record mask.
"""

import enum

from fileguard.errors import UnknownEventKind

# Events reported for a watch.
IN_ACCESS = 0x00000001
IN_MODIFY = 0x00000002
IN_ATTRIB = 0x00000004
IN_CLOSE_WRITE = 0x00000008
IN_CLOSE_NOWRITE = 0x00000010
IN_OPEN = 0x00000020
IN_MOVED_FROM = 0x00000040
IN_MOVED_TO = 0x00000080
IN_CREATE = 0x00000100
IN_DELETE = 0x00000200
IN_DELETE_SELF = 0x00000400
IN_MOVE_SELF = 0x00000800

IN_ALL_EVENTS = (
    IN_ACCESS | IN_MODIFY | IN_ATTRIB | IN_CLOSE_WRITE | IN_CLOSE_NOWRITE
    | IN_OPEN | IN_MOVED_FROM | IN_MOVED_TO | IN_CREATE | IN_DELETE
    | IN_DELETE_SELF | IN_MOVE_SELF
)

# Sent by the kernel without being asked for.
IN_UNMOUNT = 0x00002000
IN_Q_OVERFLOW = 0x00004000
IN_IGNORED = 0x00008000

# Qualifier: the subject of the event is a directory.
IN_ISDIR = 0x40000000


class CanonicalEvent(enum.Enum):
    """The event kinds FileGuard understands, in classification order."""

    IN_ACCESS = "IN_ACCESS"
    IN_ATTRIB = "IN_ATTRIB"
    IN_CLOSE_WRITE = "IN_CLOSE_WRITE"
    IN_CLOSE_NOWRITE = "IN_CLOSE_NOWRITE"
    IN_CREATE = "IN_CREATE"
    IN_DELETE = "IN_DELETE"
    IN_DELETE_SELF = "IN_DELETE_SELF"
    IN_MODIFY = "IN_MODIFY"
    IN_MOVE_SELF = "IN_MOVE_SELF"
    IN_MOVED_FROM = "IN_MOVED_FROM"
    IN_MOVED_TO = "IN_MOVED_TO"
    IN_OPEN = "IN_OPEN"
    IN_UNMOUNT = "IN_UNMOUNT"

    @property
    def mask(self) -> int:
        return EVENT_MASKS[self]

    @classmethod
    def from_name(cls, name: str) -> "CanonicalEvent":
        """
        Resolve a configured event name such as ``IN_MODIFY``.

        Raises:
            ValueError: If the name is not part of the vocabulary.
        """
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown inode event: {name}") from None


EVENT_MASKS = {
    CanonicalEvent.IN_ACCESS: IN_ACCESS,
    CanonicalEvent.IN_ATTRIB: IN_ATTRIB,
    CanonicalEvent.IN_CLOSE_WRITE: IN_CLOSE_WRITE,
    CanonicalEvent.IN_CLOSE_NOWRITE: IN_CLOSE_NOWRITE,
    CanonicalEvent.IN_CREATE: IN_CREATE,
    CanonicalEvent.IN_DELETE: IN_DELETE,
    CanonicalEvent.IN_DELETE_SELF: IN_DELETE_SELF,
    CanonicalEvent.IN_MODIFY: IN_MODIFY,
    CanonicalEvent.IN_MOVE_SELF: IN_MOVE_SELF,
    CanonicalEvent.IN_MOVED_FROM: IN_MOVED_FROM,
    CanonicalEvent.IN_MOVED_TO: IN_MOVED_TO,
    CanonicalEvent.IN_OPEN: IN_OPEN,
    CanonicalEvent.IN_UNMOUNT: IN_UNMOUNT,
}

KNOWN_EVENTS_MASK = 0
for _bit in EVENT_MASKS.values():
    KNOWN_EVENTS_MASK |= _bit
del _bit


def classify(mask: int) -> CanonicalEvent:
    """
    Map an event mask to a single canonical event.

    When several known bits are set, the event declared first in
    CanonicalEvent wins.

    Args:
        mask: The change-kind bitmask of a decoded record.

    Returns:
        The canonical event for the mask.

    Raises:
        UnknownEventKind: If the mask is empty or carries bits outside the
            known vocabulary (IN_ISDIR aside).
    """
    kinds = mask & ~IN_ISDIR
    if not kinds or kinds & ~KNOWN_EVENTS_MASK:
        raise UnknownEventKind(mask)

    for event in CanonicalEvent:
        if kinds & event.mask:
            return event

    # Unreachable: kinds is non-empty and within KNOWN_EVENTS_MASK.
    raise UnknownEventKind(mask)
