"""Create the initial admin user from INITIAL_ADMIN_EMAIL / INITIAL_ADMIN_PASSWORD."""
import sys

from cemetery_api.auth import find_user_by_email, get_password_hash
from cemetery_api.config import Settings, get_settings
from cemetery_api.database import Database
from cemetery_api.models import User

MIN_ADMIN_PASSWORD_LENGTH = 12


def create_admin(database: Database, settings: Settings) -> bool:
    """Create the admin account; returns False when it already exists."""
    email = (settings.INITIAL_ADMIN_EMAIL or "").strip().lower()
    password = settings.INITIAL_ADMIN_PASSWORD or ""
    if not email or not password:
        raise ValueError("INITIAL_ADMIN_EMAIL and INITIAL_ADMIN_PASSWORD must be set")

    if len(password) < MIN_ADMIN_PASSWORD_LENGTH:
        print(f"⚠️  Warning: Admin password should be at least {MIN_ADMIN_PASSWORD_LENGTH} characters")

    database.create_all()
    db = database.session()

    try:
        if find_user_by_email(db, email) is not None:
            print("ℹ️  Admin user already exists, skipping creation")
            return False

        db.add(User(email=email, password_hash=get_password_hash(password), name="Admin User", role="admin"))
        db.commit()
        print(f"✅ Initial admin user created: {email}")
        print("⚠️  Please change the password immediately after first login")
        return True

    except Exception as e:
        db.rollback()
        print(f"❌ Error creating admin user: {e}")
        raise
    finally:
        db.close()


def main() -> int:
    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        create_admin(database, settings)
    except ValueError as e:
        print(f"❌ {e}")
        return 1
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
