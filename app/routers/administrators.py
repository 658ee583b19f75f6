from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.db.session import get_session
from app.routers.auth import get_current_administrator
from app.schemas.administrator import AdministratorCreate, AdministratorUpdate
from app.services.administrator import AdministratorService
from app.core.responses import envelope

router = APIRouter(dependencies=[Depends(get_current_administrator)])


def get_administrator_service(session: Session = Depends(get_session)) -> AdministratorService:
    return AdministratorService(session)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_administrator(
    data: AdministratorCreate,
    service: AdministratorService = Depends(get_administrator_service),
):
    administrator = service.create(data.email, data.password, data.first_name, data.last_name)
    return envelope(
        "Administrator created successfully",
        administrator.to_response(),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("")
def list_administrators(service: AdministratorService = Depends(get_administrator_service)):
    administrators = service.find_all()
    return envelope(
        "Administrators retrieved successfully",
        [administrator.to_response() for administrator in administrators],
        count=service.count(),
    )


@router.get("/profile/{administrator_id}")
def administrator_profile(
    administrator_id: str,
    service: AdministratorService = Depends(get_administrator_service),
):
    """Profile of any active administrator, looked up by the authenticated caller."""
    administrator = service.find_one(administrator_id)
    return envelope("Administrator profile received successfully", administrator.to_response())


@router.get("/{administrator_id}")
def get_administrator(
    administrator_id: str,
    service: AdministratorService = Depends(get_administrator_service),
):
    return envelope("Administrator retrieved successfully", service.find_one(administrator_id).to_response())


@router.patch("/{administrator_id}")
def update_administrator(
    administrator_id: str,
    data: AdministratorUpdate,
    service: AdministratorService = Depends(get_administrator_service),
):
    administrator = service.update(administrator_id, data.model_dump(exclude_unset=True))
    return envelope("Administrator updated successfully", administrator.to_response())


@router.delete("/{administrator_id}")
def delete_administrator(
    administrator_id: str,
    service: AdministratorService = Depends(get_administrator_service),
):
    result = service.remove(administrator_id)
    return envelope(result["message"])
