"""Tests for TenantRepository, exercised through the guest and ceremony repositories."""

import logging

import pytest
from sqlalchemy.exc import IntegrityError

from wedding_tenancy.models import Ceremony, GuestSide
from wedding_tenancy.tenancy.errors import InvalidTenantContextError, UnknownColumnError


@pytest.mark.asyncio
async def test_rows_are_invisible_from_another_tenant(repos, event, other_event, make_guest):
    """A guest of one event cannot be read, changed or deleted from another."""
    guest = await make_guest(event.id, first_name="Ana")

    assert await repos.guests.get_by_id(guest.id, other_event.id) is None
    assert await repos.guests.get_all_by_tenant(other_event.id) == []
    assert await repos.guests.update(guest.id, {"first_name": "Mallory"}, other_event.id) is None
    assert await repos.guests.delete(guest.id, other_event.id) is False

    unchanged = await repos.guests.get_by_id(guest.id, event.id)
    assert unchanged.first_name == "Ana"


@pytest.mark.asyncio
async def test_create_stamps_tenant_over_payload(repos, event, other_event):
    created = await repos.guests.create(
        {"first_name": "Ana", "last_name": "Rao", "side": GuestSide.GROOM, "event_id": other_event.id},
        event.id,
    )

    assert created.id > 0
    assert created.event_id == event.id
    assert await repos.guests.get_by_id(created.id, other_event.id) is None


@pytest.mark.asyncio
async def test_update_cannot_move_row_to_another_tenant(repos, event, other_event, make_guest):
    guest = await make_guest(event.id)

    updated = await repos.guests.update(guest.id, {"event_id": other_event.id, "notes": "vip"}, event.id)

    assert updated.event_id == event.id
    assert updated.notes == "vip"


@pytest.mark.asyncio
async def test_update_cannot_change_the_primary_key(repos, event, make_guest):
    guest = await make_guest(event.id)

    updated = await repos.guests.update(guest.id, {"id": guest.id + 100, "notes": "vip"}, event.id)

    assert updated.id == guest.id
    assert updated.notes == "vip"
    assert (await repos.guests.get_by_id(guest.id, event.id)).notes == "vip"
    assert await repos.guests.get_by_id(guest.id + 100, event.id) is None


@pytest.mark.asyncio
async def test_update_without_values_returns_current_row(repos, event, make_guest):
    guest = await make_guest(event.id)

    assert await repos.guests.update(guest.id, {}, event.id) == guest


@pytest.mark.asyncio
async def test_bulk_create_with_empty_list_is_a_no_op(repos, event):
    assert await repos.guests.bulk_create([], event.id) == []
    assert await repos.guests.count_by_tenant(event.id) == 0


@pytest.mark.asyncio
async def test_bulk_create_validates_tenant_even_when_empty(repos):
    with pytest.raises(InvalidTenantContextError):
        await repos.guests.bulk_create([], 0)


@pytest.mark.asyncio
async def test_bulk_create_keeps_input_order(repos, event):
    created = await repos.guests.bulk_create(
        [
            {"first_name": "Ana", "last_name": "Rao", "side": GuestSide.BRIDE},
            {"first_name": "Raj", "last_name": "Rao", "side": GuestSide.GROOM},
            {"first_name": "Meera", "last_name": "Rao", "side": GuestSide.BRIDE},
        ],
        event.id,
    )

    assert [guest.first_name for guest in created] == ["Ana", "Raj", "Meera"]
    assert {guest.event_id for guest in created} == {event.id}
    assert len({guest.id for guest in created}) == 3


@pytest.mark.asyncio
async def test_delete_all_by_tenant_leaves_other_tenants_alone(repos, event, other_event, make_guest):
    for _ in range(8):
        await make_guest(event.id)
    for _ in range(3):
        await make_guest(other_event.id)

    assert await repos.guests.delete_all_by_tenant(event.id) == 8
    assert await repos.guests.get_all_by_tenant(event.id) == []
    assert len(await repos.guests.get_all_by_tenant(other_event.id)) == 3


@pytest.mark.asyncio
async def test_delete_reports_whether_a_row_went(repos, event, make_guest):
    guest = await make_guest(event.id)

    assert await repos.guests.delete(guest.id, event.id) is True
    assert await repos.guests.delete(guest.id, event.id) is False


@pytest.mark.asyncio
async def test_get_by_ids_drops_foreign_ids(repos, event, other_event, make_guest):
    mine = [await make_guest(event.id) for _ in range(2)]
    foreign = await make_guest(other_event.id)

    found = await repos.guests.get_by_ids([mine[0].id, foreign.id, mine[1].id], event.id)

    assert [guest.id for guest in found] == [mine[0].id, mine[1].id]


@pytest.mark.asyncio
async def test_get_all_by_tenant_applies_extra_predicates(repos, event, make_ceremony):
    await make_ceremony(event.id, name="Mehendi")
    await make_ceremony(event.id, name="Sangeet")

    found = await repos.ceremonies.get_all_by_tenant(event.id, Ceremony.name == "Mehendi")

    assert [ceremony.name for ceremony in found] == ["Mehendi"]


@pytest.mark.asyncio
async def test_unknown_payload_key_is_rejected_before_writing(repos, event):
    with pytest.raises(UnknownColumnError):
        await repos.guests.create({"first_name": "Ana", "last_name": "Rao", "side": "bride", "shoe": 42}, event.id)

    assert await repos.guests.count_by_tenant(event.id) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("tenant_id", [None, 0, -1, "abc"])
async def test_malformed_tenant_is_rejected(repos, tenant_id):
    with pytest.raises(InvalidTenantContextError):
        await repos.guests.get_all_by_tenant(tenant_id)
    with pytest.raises(InvalidTenantContextError):
        await repos.guests.create({"first_name": "Ana"}, tenant_id)
    with pytest.raises(InvalidTenantContextError):
        await repos.guests.delete_all_by_tenant(tenant_id)


@pytest.mark.asyncio
async def test_store_errors_are_logged_and_reraised(repos, event, caplog):
    caplog.set_level(logging.ERROR)

    with pytest.raises(IntegrityError):
        await repos.guests.create({"first_name": "Ana", "side": "bride"}, event.id)

    assert f"Failed to create guests for event {event.id}" in caplog.text
