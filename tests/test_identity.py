from __future__ import annotations

import pytest

from pillscale.state.identity import IdentityResolver

ADDR_A = "AA:BB:CC:DD:EE:01"
ADDR_B = "AA:BB:CC:DD:EE:02"


def test_pair_and_resolve() -> None:
    resolver = IdentityResolver()
    identity = resolver.pair(ADDR_A, 5, "kitchen")

    assert identity.slot_id == 5
    assert identity.label == "kitchen"
    assert resolver.resolve(ADDR_A) == 5
    assert resolver.address_for(5) == ADDR_A
    assert resolver.label(ADDR_A) == "kitchen"


def test_addresses_are_normalized() -> None:
    resolver = IdentityResolver()
    resolver.pair("  aa:bb:cc:dd:ee:01 ", 2)

    assert resolver.resolve(ADDR_A) == 2
    assert resolver.resolve("aa:bb:cc:dd:ee:01") == 2
    assert resolver.address_for(2) == ADDR_A


def test_new_address_for_a_slot_evicts_the_previous_address() -> None:
    resolver = IdentityResolver()
    resolver.pair(ADDR_A, 5)
    resolver.pair(ADDR_B, 5)

    assert resolver.resolve(ADDR_A) is None
    assert resolver.resolve(ADDR_B) == 5
    assert resolver.address_for(5) == ADDR_B


def test_moving_an_address_frees_its_old_slot() -> None:
    resolver = IdentityResolver()
    resolver.pair(ADDR_A, 1)
    resolver.pair(ADDR_A, 3)

    assert resolver.resolve(ADDR_A) == 3
    assert resolver.address_for(1) is None
    assert [(e.address, e.slot_id) for e in resolver.entries()] == [(ADDR_A, 3)]


def test_repairing_the_same_pair_is_stable() -> None:
    resolver = IdentityResolver()
    resolver.pair(ADDR_A, 1)
    resolver.pair(ADDR_A, 1)

    assert len(resolver.entries()) == 1


def test_unpair_is_idempotent_and_keeps_label() -> None:
    resolver = IdentityResolver()
    resolver.pair(ADDR_A, 4, "bedroom")

    assert resolver.unpair(4) == ADDR_A
    assert resolver.unpair(4) is None
    assert resolver.unpair(9) is None
    assert resolver.resolve(ADDR_A) is None
    assert resolver.label(ADDR_A) == "bedroom"


def test_effective_slot_prefers_pairing_over_hint() -> None:
    resolver = IdentityResolver()
    resolver.pair(ADDR_A, 7)

    assert resolver.effective_slot(ADDR_A, 1) == 7
    assert resolver.effective_slot(ADDR_B, 1) == 1
    assert resolver.effective_slot(None, 3) == 3


@pytest.mark.parametrize("slot_id", [0, -1, 256])
def test_pair_rejects_out_of_range_slots(slot_id: int) -> None:
    with pytest.raises(ValueError, match="slot id"):
        IdentityResolver().pair(ADDR_A, slot_id)


def test_pair_rejects_blank_address() -> None:
    with pytest.raises(ValueError, match="address"):
        IdentityResolver().pair("   ", 1)


def test_blank_label_removes_it() -> None:
    resolver = IdentityResolver()
    resolver.set_label(ADDR_A, "desk")
    resolver.set_label(ADDR_A, "  ")

    assert resolver.label(ADDR_A) is None
