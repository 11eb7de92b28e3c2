"""
Create the initial admin account
Usage: SEED_ADMIN_EMAIL=... SEED_ADMIN_PASSWORD=... python seed_admin.py
"""
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from carrierhub import models  # noqa: F401
from carrierhub.database import Base, SessionLocal, engine
from carrierhub.domain.auth.service import AuthService

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def seed_admin(email: str, password: str, name: str):
    Base.metadata.create_all(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        admin, created = AuthService(db).ensure_admin(email, password, name)
    finally:
        db.close()

    if created:
        logger.info(f"✅ Admin {admin.email} created")
    else:
        logger.info(f"ℹ️ Admin {admin.email} already exists, nothing to do")


if __name__ == "__main__":
    email = os.getenv("SEED_ADMIN_EMAIL")
    password = os.getenv("SEED_ADMIN_PASSWORD")
    name = os.getenv("SEED_ADMIN_NAME", "CarrierHub Admin")

    if not email or not password:
        logger.error("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set")
        sys.exit(1)

    try:
        seed_admin(email, password, name)
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
