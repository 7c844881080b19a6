"""Services router - grooming catalog and breed pricing."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_user, get_db, require_roles
from groomypaws.db.enums import Role
from groomypaws.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServicePriceListResponse,
    ServicePriceRead,
    ServicePriceResponse,
    ServicePriceUpsert,
    ServiceRead,
    ServiceResponse,
    ServiceUpdate,
)
from groomypaws.services import catalog_service

router = APIRouter()

require_admin = require_roles([Role.ADMIN])


def _get_service_or_404(db: Session, service_id: UUID):
    service = catalog_service.get_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


# =============================================================================
# Catalog (any authenticated user)
# =============================================================================

@router.get("", response_model=ServiceListResponse, dependencies=[Depends(get_current_user)])
def list_services(db: Session = Depends(get_db)):
    """Active services ordered by name."""
    services = catalog_service.list_active_services(db)
    return ServiceListResponse(services=[ServiceRead.model_validate(s) for s in services])


@router.get(
    "/{service_id}/prices",
    response_model=ServicePriceListResponse,
    dependencies=[Depends(get_current_user)],
)
def list_service_prices(service_id: UUID, db: Session = Depends(get_db)):
    prices = catalog_service.list_prices(db, service_id)
    return ServicePriceListResponse(prices=[ServicePriceRead.model_validate(p) for p in prices])


# =============================================================================
# Admin
# =============================================================================

@router.post("", response_model=ServiceResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    try:
        service = catalog_service.create_service(db, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ServiceResponse(service=ServiceRead.model_validate(service))


@router.put("/{service_id}", response_model=ServiceResponse, dependencies=[Depends(require_admin)])
def update_service(service_id: UUID, data: ServiceUpdate, db: Session = Depends(get_db)):
    service = _get_service_or_404(db, service_id)
    service = catalog_service.update_service(db, service, data.model_dump(exclude_unset=True))
    return ServiceResponse(service=ServiceRead.model_validate(service))


@router.post(
    "/{service_id}/prices",
    response_model=ServicePriceResponse,
    dependencies=[Depends(require_admin)],
)
def upsert_service_price(
    service_id: UUID,
    data: ServicePriceUpsert,
    db: Session = Depends(get_db),
):
    """Set a breed price. 201 when created, 200 when updated."""
    _get_service_or_404(db, service_id)
    try:
        row, created = catalog_service.upsert_price(
            db,
            service_id,
            data.breed,
            Decimal(str(data.price)) if data.price is not None else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    body = ServicePriceResponse(price=ServicePriceRead.model_validate(row))
    return JSONResponse(status_code=201 if created else 200, content=body.model_dump(mode="json"))


@router.delete("/{service_id}/prices/{price_id}", dependencies=[Depends(require_admin)])
def delete_service_price(service_id: UUID, price_id: UUID, db: Session = Depends(get_db)):
    if not catalog_service.delete_price(db, service_id, price_id):
        raise HTTPException(status_code=404, detail="Price not found")
    return {"message": "Price deleted successfully"}


@router.delete("/{service_id}/prices", dependencies=[Depends(require_admin)])
def delete_all_service_prices(service_id: UUID, db: Session = Depends(get_db)):
    deleted = catalog_service.delete_all_prices(db, service_id)
    return {"message": "Prices deleted successfully", "deleted": deleted}
