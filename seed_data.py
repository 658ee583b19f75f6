from typing import Optional
from pydantic import ValidationError
from sqlmodel import Session
from app.db.session import engine, create_db_and_tables
from app.core.config import settings
from app.models.administrator import Administrator
from app.schemas.administrator import AdministratorCreate
from app.services.administrator import AdministratorService

def seed_administrator(bind=None) -> Optional[Administrator]:
    bind = bind or engine
    print("Creating database and tables...")
    create_db_and_tables(bind)

    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        print("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set. Skipping seed.")
        return None

    # Same rules as POST /api/administrators, so the seeded account can log in
    try:
        data = AdministratorCreate(
            email=settings.SEED_ADMIN_EMAIL,
            password=settings.SEED_ADMIN_PASSWORD,
            first_name=settings.SEED_ADMIN_FIRST_NAME,
            last_name=settings.SEED_ADMIN_LAST_NAME,
        )
    except ValidationError as e:
        for error in e.errors():
            print(f"Invalid seed administrator {'.'.join(str(part) for part in error['loc'])}: {error['msg']}")
        return None

    with Session(bind) as session:
        service = AdministratorService(session)

        # Check if the administrator already exists to avoid duplicates
        if service.find_by_email(data.email):
            print(f"Administrator {data.email} already exists. Skipping seed.")
            return None

        print("Seeding initial administrator...")
        administrator = service.create(data.email, data.password, data.first_name, data.last_name)
        print(f"Administrator created with ID: {administrator.id}")
        return administrator

if __name__ == "__main__":
    seed_administrator()
