"""Car API routes.

Learn: FastAPI routers define HTTP endpoints. Each route function
receives the request's db session via Depends() and delegates to the
service layer. Routes shape the envelope, services raise the errors.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.db.engine import get_db
from motorpool.schemas.car import CarRead, CarWrite
from motorpool.schemas.common import Envelope
from motorpool.services.car_service import CarService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> CarService:
    return CarService(db)


@router.get("/cars", response_model=Envelope[list[CarRead]])
async def list_cars(svc: CarService = Depends(_svc)):
    """All cars that have not been soft-deleted."""
    cars = await svc.list()
    return Envelope(
        message=f"{len(cars)} car(s)",
        data=[CarRead.model_validate(c) for c in cars],
    )


@router.post("/cars", response_model=Envelope[CarRead], status_code=201)
async def create_car(body: CarWrite, svc: CarService = Depends(_svc)):
    car = await svc.create(**body.model_dump())
    return Envelope(message="Car created", data=CarRead.model_validate(car))


@router.put("/cars/{car_id}", response_model=Envelope[CarRead])
async def update_car(
    car_id: uuid.UUID,
    body: CarWrite,
    svc: CarService = Depends(_svc),
):
    """Replace make, model and year. Works on soft-deleted cars too."""
    car = await svc.update(car_id, **body.model_dump())
    return Envelope(message="Car updated", data=CarRead.model_validate(car))


@router.delete("/cars/{car_id}", response_model=Envelope[CarRead])
async def delete_car(car_id: uuid.UUID, svc: CarService = Depends(_svc)):
    """Soft delete: the row stays, it just stops being listed."""
    car = await svc.soft_delete(car_id)
    return Envelope(message="Car deleted", data=CarRead.model_validate(car))
