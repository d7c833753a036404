"""Seed the bootstrap admin account and a sample public query."""
import sys
from sqlalchemy.orm import Session
from app.core.database import SessionLocal
from app.core.config import settings
from app.core.security import get_password_hash, verify_password
from app.core.time import iso_date, iso_timestamp
from app.models import User, SavedQuery
from app.schemas.query import Query, Visibility
from app.storage.mapping import query_to_record

SAMPLE_QUERY_NAME = "Row counts per table"
SAMPLE_QUERY_SQL = """SELECT table_name, table_rows
FROM information_schema.tables
WHERE table_schema = DATABASE()
ORDER BY table_rows DESC;"""


def seed_admin(db: Session) -> User:
    """Create the configured admin account if it does not exist yet."""
    admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
    if admin:
        print(f"✓ Admin user already exists ({settings.ADMIN_EMAIL})")
        if settings.ENVIRONMENT == "production" and verify_password("admin123", admin.password_hash):
            print(f"WARNING: {settings.ADMIN_EMAIL} still uses the default password in production. Rotate immediately.", file=sys.stderr)
        return admin

    admin = User(
        email=settings.ADMIN_EMAIL,
        name="Admin User",
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
        is_admin=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    print(f"✓ Created admin user ({settings.ADMIN_EMAIL})")
    return admin


def seed_sample_query(db: Session, owner: User) -> None:
    """Publish one example query so the public listing is not empty."""
    existing = db.query(SavedQuery).filter(
        SavedQuery.user_id == owner.id,
        SavedQuery.name == SAMPLE_QUERY_NAME
    ).first()
    if existing:
        print("✓ Sample query already exists")
        return

    sample = Query(
        name=SAMPLE_QUERY_NAME,
        sql=SAMPLE_QUERY_SQL,
        description="Largest tables first in the current schema.",
        date=iso_date(),
        timestamp=iso_timestamp(),
        tags=["metadata", "mysql"],
        user_id=owner.id,
        visibility=Visibility.PUBLIC,
    )
    db.add(SavedQuery(**query_to_record(sample)))
    db.commit()
    print("✓ Created sample public query")


def seed_database():
    """Seed essential data."""
    db = SessionLocal()
    try:
        print("Starting database seeding...")
        admin = seed_admin(db)
        seed_sample_query(db, admin)
        print("✓ Seeding complete")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
