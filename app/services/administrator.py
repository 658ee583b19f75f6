from typing import List, Optional
from sqlmodel import Session, select, func
from fastapi import HTTPException, status

from app.models.administrator import Administrator, AdministratorStatus
from app.core.security import get_password_hash, verify_password
from app.core.logging import get_logger

logger = get_logger(__name__)

class AdministratorService:
    def __init__(self, session: Session):
        self.session = session

    def _get_active(self, administrator_id: str) -> Administrator:
        administrator = self.session.exec(
            select(Administrator)
            .where(Administrator.id == administrator_id)
            .where(Administrator.status == AdministratorStatus.ACTIVE)
        ).first()
        if not administrator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Administrator not found")
        return administrator

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        # Uniqueness spans every status, deactivated accounts keep their email
        query = select(Administrator).where(Administrator.email == email)
        if exclude_id:
            query = query.where(Administrator.id != exclude_id)
        return self.session.exec(query).first() is not None

    def create(self, email: str, password: str, first_name: str, last_name: str) -> Administrator:
        if self._email_taken(email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Administrator with this email already exists"
            )

        administrator = Administrator(
            email=email,
            password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            status=AdministratorStatus.ACTIVE,
        )
        self.session.add(administrator)
        self.session.commit()
        self.session.refresh(administrator)
        logger.info(f"Administrator {administrator.id} created")
        return administrator

    def find_all(self) -> List[Administrator]:
        return self.session.exec(
            select(Administrator)
            .where(Administrator.status == AdministratorStatus.ACTIVE)
            .order_by(Administrator.created_at.desc())
        ).all()

    def count(self) -> int:
        return self.session.exec(
            select(func.count(Administrator.id))
            .where(Administrator.status == AdministratorStatus.ACTIVE)
        ).one()

    def find_one(self, administrator_id: str) -> Administrator:
        return self._get_active(administrator_id)

    def find_by_email(self, email: str) -> Optional[Administrator]:
        return self.session.exec(
            select(Administrator)
            .where(Administrator.email == email)
            .where(Administrator.status == AdministratorStatus.ACTIVE)
        ).first()

    def find_many(self, administrator_ids) -> dict:
        """Active and deactivated authors keyed by id, in a single query."""
        ids = {administrator_id for administrator_id in administrator_ids if administrator_id}
        if not ids:
            return {}
        administrators = self.session.exec(
            select(Administrator).where(Administrator.id.in_(ids))
        ).all()
        return {administrator.id: administrator for administrator in administrators}

    def update(self, administrator_id: str, patch: dict) -> Administrator:
        administrator = self._get_active(administrator_id)

        email = patch.get("email")
        if email and email != administrator.email and self._email_taken(email, exclude_id=administrator.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Administrator with this email already exists"
            )

        for key, value in patch.items():
            if value is None:
                continue
            if key == "password":
                value = get_password_hash(value)
            setattr(administrator, key, value)

        self.session.add(administrator)
        self.session.commit()
        self.session.refresh(administrator)
        logger.info(f"Administrator {administrator.id} updated")
        return administrator

    def remove(self, administrator_id: str) -> dict:
        administrator = self._get_active(administrator_id)
        administrator.status = AdministratorStatus.DEACTIVATED
        self.session.add(administrator)
        self.session.commit()
        logger.info(f"Administrator {administrator_id} deactivated")
        return {"message": "Administrator deleted successfully"}

    def validate_login(self, email: str, password: str) -> Administrator:
        administrator = self.find_by_email(email)
        if not administrator or not verify_password(password, administrator.password):
            logger.warning("Rejected login attempt")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )
        return administrator
