import itertools

import pytest

from fileguard import events
from fileguard.errors import UnknownEventKind
from fileguard.events import CanonicalEvent, classify

ORDER = [
    "IN_ACCESS", "IN_ATTRIB", "IN_CLOSE_WRITE", "IN_CLOSE_NOWRITE", "IN_CREATE",
    "IN_DELETE", "IN_DELETE_SELF", "IN_MODIFY", "IN_MOVE_SELF", "IN_MOVED_FROM",
    "IN_MOVED_TO", "IN_OPEN", "IN_UNMOUNT",
]


def test_enumeration_order():
    assert [e.value for e in CanonicalEvent] == ORDER


@pytest.mark.parametrize("event", list(CanonicalEvent))
def test_single_bit_classifies_to_its_event(event):
    assert classify(event.mask) is event


def test_two_bits_resolve_to_first_in_order():
    """With two known bits set, the event listed first wins, every time."""
    members = list(CanonicalEvent)
    for first, second in itertools.combinations(members, 2):
        mask = first.mask | second.mask
        assert classify(mask) is first
        assert classify(mask) is first


def test_directory_qualifier_is_ignored():
    assert classify(events.IN_CREATE | events.IN_ISDIR) is CanonicalEvent.IN_CREATE


@pytest.mark.parametrize("mask", [
    0,
    events.IN_Q_OVERFLOW,
    events.IN_IGNORED,
    events.IN_ISDIR,
    events.IN_MODIFY | events.IN_IGNORED,
    0x00100000,
])
def test_unknown_masks_raise(mask):
    with pytest.raises(UnknownEventKind) as excinfo:
        classify(mask)
    assert excinfo.value.mask == mask


def test_from_name():
    assert CanonicalEvent.from_name("IN_MODIFY") is CanonicalEvent.IN_MODIFY
    with pytest.raises(ValueError):
        CanonicalEvent.from_name("IN_BOGUS")


def test_watch_mask_covers_requested_events():
    """Everything but IN_UNMOUNT, which the kernel always reports, is requested."""
    for event in CanonicalEvent:
        if event is CanonicalEvent.IN_UNMOUNT:
            assert not events.IN_ALL_EVENTS & event.mask
        else:
            assert events.IN_ALL_EVENTS & event.mask
