"""
Create test accounts and recipients
Run from the project root: python -m scripts.create_test_users
"""
import logging

from app.config.database import SessionLocal, init_db
from app.shared.database.models import User, Recipient, UserRole, RecipientType
from app.core.auth.service import AuthService

logger = logging.getLogger(__name__)

TEST_USERS = [
    {
        "username": "worker",
        "email": "worker@mailroom.edu",
        "password": "worker123",
        "role": UserRole.WORKER.value,
        "full_name": "Mailroom Worker",
        "l_number": None
    },
    {
        "username": "student",
        "email": "student@mailroom.edu",
        "password": "student123",
        "role": UserRole.STUDENT.value,
        "full_name": "Test Student",
        "l_number": "L12345"
    }
]

TEST_RECIPIENTS = [
    {"name": "Test Student", "l_number": "L12345", "type": RecipientType.STUDENT.value,
     "mailbox": "1001", "email": "student@mailroom.edu"},
    {"name": "Jordan Faculty", "l_number": "L20001", "type": RecipientType.FACULTY.value,
     "mailbox": "2001", "email": "faculty@mailroom.edu"},
    {"name": "Registrar's Office", "l_number": "D00001", "type": RecipientType.DEPARTMENT.value,
     "mailbox": "3001", "email": "registrar@mailroom.edu"}
]

def create_test_users():
    """Create one account per role and a few recipients, skipping what already exists"""
    init_db()
    db = SessionLocal()

    try:
        for user_data in TEST_USERS:
            if db.query(User).filter(User.email == user_data["email"]).first():
                logger.info(f"✅ User {user_data['email']} already exists")
                continue
            db.add(User(
                username=user_data["username"],
                email=user_data["email"],
                password_hash=AuthService.get_password_hash(user_data["password"]),
                role=user_data["role"],
                full_name=user_data["full_name"],
                l_number=user_data["l_number"],
                is_active=True
            ))
            logger.info(f"👤 Created {user_data['role']}: {user_data['email']} / {user_data['password']}")

        for recipient_data in TEST_RECIPIENTS:
            if db.query(Recipient).filter(Recipient.l_number == recipient_data["l_number"]).first():
                logger.info(f"✅ Recipient {recipient_data['l_number']} already exists")
                continue
            db.add(Recipient(**recipient_data))
            logger.info(f"📬 Created recipient {recipient_data['name']} ({recipient_data['l_number']})")

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("❌ Error creating test data")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    create_test_users()
