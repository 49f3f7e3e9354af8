"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)


def init_default_admin(db: Session) -> None:
    """
    Create an admin user if no admin exists yet.

    The account has no password; sign-in is handled by the identity
    provider. Use ``python main.py issue-token`` for a local token.
    """
    try:
        existing_admin = db.query(User).filter(User.role == "admin").first()

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Email: {existing_admin.email})"
            )
            return

        admin = User(
            full_name=settings.admin_default_name,
            email=settings.admin_default_email,
            role="admin",
            is_active=True,
        )

        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info("=" * 60)
        logger.info("🎉 DEFAULT ADMIN CREATED")
        logger.info(f"ID: {admin.id}")
        logger.info(f"Email: {admin.email}")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"❌ Failed to initialize default admin: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    init_default_admin(db)

    logger.info("✅ Application initialization completed!")
