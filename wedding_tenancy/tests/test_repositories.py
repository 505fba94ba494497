"""Tests for the repository bundle."""

import dataclasses

import pytest

from wedding_tenancy.repositories import TenantRepositories


def test_every_repository_shares_the_session(db_session):
    bundle = TenantRepositories.for_session(db_session)

    for field in dataclasses.fields(bundle):
        assert getattr(bundle, field.name).session_overwrite is db_session


@pytest.mark.asyncio
async def test_rollback_discards_the_whole_unit_of_work(db_session, make_event, make_guest):
    event = await make_event()
    await make_guest(event.id)
    await db_session.rollback()

    bundle = TenantRepositories.for_session(db_session)
    assert await bundle.events.get_all() == []


@pytest.mark.asyncio
async def test_repositories_hand_out_frozen_dtos(repos, event, make_guest):
    guest = await make_guest(event.id)

    with pytest.raises(dataclasses.FrozenInstanceError):
        guest.first_name = "Changed"
