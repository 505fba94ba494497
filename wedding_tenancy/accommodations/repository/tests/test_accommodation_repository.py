"""Tests for AccommodationRepository."""

import pytest
from pydantic import ValidationError
from sqlalchemy import update

from wedding_tenancy.accommodations.dtos import AccommodationCreate, AccommodationStatsDTO, AccommodationUpdate
from wedding_tenancy.models import Accommodation


async def allocate(repos, tenant_id, accommodation, guest):
    return await repos.room_allocations.create(
        {"accommodation_id": accommodation.id, "guest_id": guest.id}, tenant_id
    )


@pytest.mark.asyncio
async def test_stats_are_zero_without_accommodations(repos, event):
    assert await repos.accommodations.get_stats(event.id) == AccommodationStatsDTO()


@pytest.mark.asyncio
async def test_stats_sum_rooms_of_the_event_only(repos, event, other_event, make_guest, make_accommodation):
    villa = await make_accommodation(event.id, total_rooms=4)
    await make_accommodation(event.id, total_rooms=6)
    await make_accommodation(other_event.id, total_rooms=50)
    await allocate(repos, event.id, villa, await make_guest(event.id))

    stats = await repos.accommodations.get_stats(event.id)

    assert stats == AccommodationStatsDTO(
        total_rooms=10, allocated_rooms=1, available_rooms=9, accommodation_types=2
    )


@pytest.mark.asyncio
async def test_accommodations_with_allocation(repos, event, make_guest, make_accommodation):
    villa = await make_accommodation(event.id, name="Villa", total_rooms=3)
    haveli = await make_accommodation(event.id, name="Haveli", total_rooms=2)
    for _ in range(2):
        await allocate(repos, event.id, villa, await make_guest(event.id))

    rows = await repos.accommodations.get_accommodations_with_allocation(event.id)

    by_name = {row.name: row for row in rows}
    assert by_name["Villa"].guests_assigned == 2
    assert by_name["Villa"].available_rooms == 1
    assert by_name["Haveli"].guests_assigned == 0
    assert by_name["Haveli"].available_rooms == 2
    assert {row.id for row in rows} == {villa.id, haveli.id}


@pytest.mark.asyncio
async def test_available_accommodations_exclude_full_ones(repos, event, make_guest, make_accommodation):
    full = await make_accommodation(event.id, name="Cottage", total_rooms=1)
    roomy = await make_accommodation(event.id, name="Palace", total_rooms=5)
    await allocate(repos, event.id, full, await make_guest(event.id))

    available = await repos.accommodations.get_available_accommodations(event.id)

    assert [accommodation.id for accommodation in available] == [roomy.id]


@pytest.mark.asyncio
async def test_allocated_rooms_cannot_be_written_by_callers(repos, event, make_accommodation):
    accommodation = await make_accommodation(event.id)

    with pytest.raises(ValueError):
        await repos.accommodations.update(accommodation.id, {"allocated_rooms": 7}, event.id)
    with pytest.raises(ValueError):
        await make_accommodation(event.id, allocated_rooms=3)


@pytest.mark.asyncio
async def test_reconcile_rewrites_drifted_counters(repos, db_session, event, make_guest, make_accommodation):
    drifted = await make_accommodation(event.id, name="Drifted")
    correct = await make_accommodation(event.id, name="Correct")
    await allocate(repos, event.id, drifted, await make_guest(event.id))
    await allocate(repos, event.id, correct, await make_guest(event.id))
    await db_session.execute(
        update(Accommodation).where(Accommodation.id == drifted.id).values(allocated_rooms=5)
    )

    assert await repos.accommodations.reconcile_allocated_rooms(event.id) == 1
    assert (await repos.accommodations.get_by_id(drifted.id, event.id)).allocated_rooms == 1
    assert await repos.accommodations.reconcile_allocated_rooms(event.id) == 0


@pytest.mark.asyncio
async def test_deleting_accommodation_removes_its_allocations(repos, event, make_guest, make_accommodation):
    accommodation = await make_accommodation(event.id)
    guest = await make_guest(event.id)
    await allocate(repos, event.id, accommodation, guest)

    assert await repos.accommodations.delete(accommodation.id, event.id) is True
    assert await repos.room_allocations.get_by_guest(guest.id, event.id) == []


@pytest.mark.asyncio
async def test_create_and_update_from_pydantic_payloads(repos, event):
    accommodation = await repos.accommodations.create(
        AccommodationCreate(name="Haveli", room_type="Suite", capacity=3, total_rooms=4, price_per_night="250 EUR"),
        event.id,
    )
    assert accommodation.allocated_rooms == 0
    assert accommodation.special_features is None

    updated = await repos.accommodations.update(accommodation.id, AccommodationUpdate(total_rooms=6), event.id)

    assert updated.total_rooms == 6
    assert updated.available_rooms == 6
    assert updated.price_per_night == "250 EUR"


def test_accommodation_payloads_reject_bad_room_numbers():
    with pytest.raises(ValidationError):
        AccommodationCreate(name="Tent", room_type="Tent", capacity=0, total_rooms=1)
    with pytest.raises(ValidationError):
        AccommodationCreate(name="Tent", room_type="Tent", capacity=2, total_rooms=-1)
    with pytest.raises(ValidationError):
        AccommodationUpdate(total_rooms=-3)
