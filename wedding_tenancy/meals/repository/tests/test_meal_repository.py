"""Tests for MealRepository."""

import pytest
import pytest_asyncio
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from wedding_tenancy.config import database
from wedding_tenancy.meals.dtos import MealOptionCreate, MealOptionUpdate
from wedding_tenancy.meals.repository.meal_repository import MealRepository
from wedding_tenancy.models import GuestMealSelection
from wedding_tenancy.tenancy.errors import CrossTenantReferenceError, InvalidEntityIdError


@pytest_asyncio.fixture
async def dinner(event, make_ceremony, make_meal_option):
    ceremony = await make_ceremony(event.id, name="Reception")
    paneer = await make_meal_option(event.id, ceremony.id, name="Paneer Tikka")
    biryani = await make_meal_option(event.id, ceremony.id, name="Biryani", is_vegetarian=False)
    return ceremony, paneer, biryani


@pytest.mark.asyncio
async def test_selection_is_an_upsert_per_guest_and_ceremony(repos, db_session, event, make_guest, dinner):
    """Choosing twice for the same ceremony keeps one row holding the latest choice."""
    ceremony, paneer, biryani = dinner
    guest = await make_guest(event.id)

    first_id = await repos.meals.create_selection(guest.id, paneer.id, ceremony.id, "no onion", event.id)
    second_id = await repos.meals.create_selection(guest.id, biryani.id, ceremony.id, "no nuts", event.id)

    assert first_id == second_id
    selections = await repos.meals.get_guest_selections(guest.id, event.id)
    assert len(selections) == 1
    assert selections[0].meal_option_id == biryani.id
    assert selections[0].meal_name == "Biryani"
    assert selections[0].ceremony_name == "Reception"
    assert selections[0].notes == "no nuts"
    count = await db_session.scalar(select(func.count(GuestMealSelection.id)))
    assert count == 1


@pytest.mark.asyncio
async def test_selection_rejects_guest_of_another_event(repos, event, other_event, make_guest, dinner):
    ceremony, paneer, _ = dinner
    stranger = await make_guest(other_event.id)

    with pytest.raises(CrossTenantReferenceError) as exc_info:
        await repos.meals.create_selection(stranger.id, paneer.id, ceremony.id, None, event.id)

    assert exc_info.value.entity == "Guest"


@pytest.mark.asyncio
async def test_selection_rejects_option_of_another_ceremony(repos, event, make_guest, make_ceremony, dinner):
    _, paneer, _ = dinner
    mehendi = await make_ceremony(event.id, name="Mehendi")
    guest = await make_guest(event.id)

    with pytest.raises(CrossTenantReferenceError) as exc_info:
        await repos.meals.create_selection(guest.id, paneer.id, mehendi.id, None, event.id)

    assert exc_info.value.entity == "MealOption"


@pytest.mark.asyncio
async def test_meal_option_requires_ceremony_of_the_event(repos, event, other_event, make_ceremony):
    foreign = await make_ceremony(other_event.id)

    with pytest.raises(CrossTenantReferenceError):
        await repos.meals.create({"ceremony_id": foreign.id, "name": "Dal"}, event.id)
    with pytest.raises(CrossTenantReferenceError):
        await repos.meals.bulk_create([{"ceremony_id": foreign.id, "name": "Dal"}], event.id)
    assert await repos.meals.count_by_tenant(event.id) == 0


@pytest.mark.asyncio
async def test_options_with_counts(repos, event, make_guest, dinner):
    ceremony, paneer, biryani = dinner
    for _ in range(2):
        guest = await make_guest(event.id)
        await repos.meals.create_selection(guest.id, paneer.id, ceremony.id, None, event.id)

    options = await repos.meals.get_options_with_counts(ceremony.id, event.id)

    counts = {option.name: option.selection_count for option in options}
    assert counts == {"Paneer Tikka": 2, "Biryani": 0}


@pytest.mark.asyncio
async def test_options_for_ceremony_are_scoped(repos, event, other_event, dinner):
    ceremony, paneer, biryani = dinner

    options = await repos.meals.get_options_for_ceremony(ceremony.id, event.id)

    assert [option.id for option in options] == [paneer.id, biryani.id]
    assert await repos.meals.get_options_for_ceremony(ceremony.id, other_event.id) == []


@pytest.mark.asyncio
async def test_delete_selection(repos, event, other_event, make_guest, dinner):
    ceremony, paneer, _ = dinner
    guest = await make_guest(event.id)
    selection_id = await repos.meals.create_selection(guest.id, paneer.id, ceremony.id, None, event.id)

    assert await repos.meals.delete_selection(selection_id, other_event.id) is False
    assert await repos.meals.delete_selection(selection_id, event.id) is True
    assert await repos.meals.delete_selection(selection_id, event.id) is False


@pytest.mark.asyncio
async def test_deleting_option_removes_its_selections(repos, event, make_guest, dinner):
    ceremony, paneer, _ = dinner
    guest = await make_guest(event.id)
    await repos.meals.create_selection(guest.id, paneer.id, ceremony.id, None, event.id)

    assert await repos.meals.delete(paneer.id, event.id) is True
    assert await repos.meals.get_guest_selections(guest.id, event.id) == []


@pytest.mark.asyncio
async def test_create_and_update_from_pydantic_payloads(repos, event, make_ceremony):
    ceremony = await make_ceremony(event.id)

    option = await repos.meals.create(MealOptionCreate(ceremony_id=ceremony.id, name="Dal", is_vegan=True), event.id)
    assert option.is_vegan is True
    assert option.is_nut_free is False

    updated = await repos.meals.update(option.id, MealOptionUpdate(name="Dal Makhani"), event.id)
    assert updated.name == "Dal Makhani"
    assert updated.ceremony_id == ceremony.id
    assert updated.is_vegan is True


def test_meal_payloads_reject_bad_ceremony_ids():
    with pytest.raises(ValidationError):
        MealOptionCreate(ceremony_id=0, name="Dal")
    with pytest.raises(ValidationError):
        MealOptionUpdate(ceremony_id=-1)


@pytest.mark.asyncio
async def test_option_without_selections_can_move_ceremony(repos, event, make_ceremony, dinner):
    _, _, biryani = dinner
    mehendi = await make_ceremony(event.id, name="Mehendi")

    moved = await repos.meals.update(biryani.id, {"ceremony_id": mehendi.id}, event.id)

    assert moved.ceremony_id == mehendi.id


@pytest.mark.asyncio
async def test_option_chosen_by_guests_stays_with_its_ceremony(repos, event, make_guest, make_ceremony, dinner):
    """Selections would otherwise pair the option with a ceremony that no longer serves it."""
    ceremony, paneer, _ = dinner
    mehendi = await make_ceremony(event.id, name="Mehendi")
    guest = await make_guest(event.id)
    await repos.meals.create_selection(guest.id, paneer.id, ceremony.id, None, event.id)

    with pytest.raises(ValueError):
        await repos.meals.update(paneer.id, {"ceremony_id": mehendi.id, "name": "Paneer"}, event.id)

    unchanged = await repos.meals.get_by_id(paneer.id, event.id)
    assert unchanged.ceremony_id == ceremony.id
    assert unchanged.name == "Paneer Tikka"
    selections = await repos.meals.get_guest_selections(guest.id, event.id)
    assert [(s.meal_option_id, s.ceremony_id) for s in selections] == [(paneer.id, ceremony.id)]


@pytest.mark.asyncio
async def test_option_cannot_move_to_foreign_or_missing_ceremony(repos, event, other_event, make_ceremony, dinner):
    ceremony, paneer, _ = dinner
    foreign = await make_ceremony(other_event.id)

    with pytest.raises(CrossTenantReferenceError):
        await repos.meals.update(paneer.id, {"ceremony_id": foreign.id}, event.id)
    with pytest.raises(InvalidEntityIdError):
        await repos.meals.update(paneer.id, {"ceremony_id": None}, event.id)

    assert (await repos.meals.get_by_id(paneer.id, event.id)).ceremony_id == ceremony.id


@pytest.mark.asyncio
async def test_ceremony_check_runs_in_the_writing_session(monkeypatch, db_engine, db_session, event, make_ceremony):
    """Without a caller session each write opens exactly one session for check and write."""
    sangeet = await make_ceremony(event.id, name="Sangeet")
    reception = await make_ceremony(event.id, name="Reception")
    await db_session.commit()

    session_maker = async_sessionmaker(db_engine, expire_on_commit=False)
    opened = []

    def open_session():
        opened.append(True)
        return session_maker()

    monkeypatch.setattr(database, "async_session_maker", open_session)
    meals = MealRepository()

    option = await meals.create({"ceremony_id": sangeet.id, "name": "Chaat"}, event.id)
    assert len(opened) == 1
    moved = await meals.update(option.id, {"ceremony_id": reception.id}, event.id)
    assert len(opened) == 2

    assert moved.ceremony_id == reception.id
