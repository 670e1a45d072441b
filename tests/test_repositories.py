"""Service-level tests for the credential store and the soft-delete repository."""

import uuid

import pytest

from motorpool.errors import DuplicateIdentity, NotFound, ValidationError
from motorpool.services.car_service import CarService
from motorpool.services.credential_store import CredentialStore


# ═══════════════════════════════════════════════════════════
# Credential store
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_and_find(db_session):
    store = CredentialStore(db_session)
    user_id = await store.register("alice", "$2b$10$hash")
    await db_session.commit()

    user = await store.find_by_username("alice")
    assert user.id == user_id
    assert user.password_hash == "$2b$10$hash"


@pytest.mark.asyncio
async def test_find_unknown(db_session):
    assert await CredentialStore(db_session).find_by_username("nobody") is None


@pytest.mark.asyncio
async def test_duplicate_username(db_session):
    store = CredentialStore(db_session)
    await store.register("alice", "h1")
    await db_session.commit()

    with pytest.raises(DuplicateIdentity):
        await store.register("alice", "h2")

    # The session is still usable after the failed insert
    assert (await store.find_by_username("alice")).password_hash == "h1"


@pytest.mark.asyncio
async def test_get_by_id(db_session):
    store = CredentialStore(db_session)
    user_id = await store.register("alice", "h1")
    await db_session.commit()

    assert (await store.get(user_id)).username == "alice"
    assert await store.get(uuid.uuid4()) is None


# ═══════════════════════════════════════════════════════════
# Soft-delete repository
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_created_cars_listed_until_deleted(db_session):
    svc = CarService(db_session)
    cars = [
        await svc.create(make="Honda", model="Civic", year=2020),
        await svc.create(make="Mazda", model="3", year=2017),
        await svc.create(make="Subaru", model="Outback", year=2012),
    ]
    assert {c.id for c in await svc.list()} == {c.id for c in cars}

    await svc.soft_delete(cars[1].id)
    assert {c.id for c in await svc.list()} == {cars[0].id, cars[2].id}

    # The row is still there
    row = await svc.get(cars[1].id)
    assert row is not None
    assert row.deleted_flag is True


@pytest.mark.asyncio
async def test_soft_delete_twice_same_state(db_session):
    svc = CarService(db_session)
    car = await svc.create(make="Honda", model="Civic", year=2020)

    once = await svc.soft_delete(car.id)
    state_once = (once.make, once.model, once.year, once.deleted_flag)
    twice = await svc.soft_delete(car.id)
    assert (twice.make, twice.model, twice.year, twice.deleted_flag) == state_once
    assert await svc.list() == []


@pytest.mark.asyncio
async def test_update_deleted_car_stays_deleted(db_session):
    svc = CarService(db_session)
    car = await svc.create(make="Honda", model="Civic", year=2020)
    await svc.soft_delete(car.id)

    updated = await svc.update(car.id, make="Honda", model="Fit", year=2014)
    assert updated.model == "Fit"
    assert updated.deleted_flag is True
    assert await svc.list() == []


@pytest.mark.asyncio
async def test_update_and_delete_unknown_id(db_session):
    svc = CarService(db_session)
    with pytest.raises(NotFound):
        await svc.update(uuid.uuid4(), make="A", model="B", year=2000)
    with pytest.raises(NotFound):
        await svc.soft_delete(uuid.uuid4())


@pytest.mark.asyncio
async def test_create_requires_all_fields(db_session):
    svc = CarService(db_session)
    with pytest.raises(ValidationError) as exc:
        await svc.create(make="Honda", model="Civic")
    assert exc.value.detail["missing"] == ["year"]


@pytest.mark.asyncio
async def test_business_fields_only(db_session):
    svc = CarService(db_session)
    with pytest.raises(ValidationError) as exc:
        await svc.create(make="Honda", model="Civic", year=2020, deleted_flag=True)
    assert exc.value.detail["unknown"] == ["deleted_flag"]


@pytest.mark.asyncio
async def test_writes_stamp_updated_at(db_session):
    svc = CarService(db_session)
    car = await svc.create(make="Honda", model="Civic", year=2020)
    assert car.updated_at is None

    updated = await svc.update(car.id, make="Honda", model="Fit", year=2014)
    assert updated.updated_at is not None
    first_write = updated.updated_at

    deleted = await svc.soft_delete(car.id)
    assert deleted.updated_at >= first_write
