import os
import sys

from hostelms.config import settings
from hostelms.core.security import get_password_hash
from hostelms.database import Database, utcnow
from hostelms.models.user import User
from hostelms.repositories import UserRepository


def create_initial_users():
    """Create an initial admin and student for a fresh hostel database"""

    database_url = os.getenv("DATABASE_URL", settings.database_url)
    database = Database(database_url)

    try:
        database.connect()
        database.create_all()
        db = database.session()

        # Check if users already exist
        existing_users = UserRepository(db).count()
        if existing_users > 0:
            print(f"✅ Database already has {existing_users} users")
            return True

        initial_users = [
            {
                "name": "Hostel Admin",
                "email": "admin@hostel.example.com",
                "password": os.getenv("ADMIN_PASSWORD", "admin123"),
                "role": "admin",
            },
            {
                "name": "Student One",
                "email": "student1@hostel.example.com",
                "password": os.getenv("STUDENT_PASSWORD", "student123"),
                "role": "student",
            },
        ]

        # Seeded accounts are pre-verified
        for user_data in initial_users:
            db.add(User(
                name=user_data["name"],
                email=user_data["email"],
                password_hash=get_password_hash(user_data["password"]),
                role=user_data["role"],
                email_verified=utcnow(),
            ))
            print(f"✅ Created user: {user_data['email']} ({user_data['role']})")

        db.commit()
        db.close()

        print("\n🎉 Successfully created initial users!")
        print("\n📋 Login Credentials:")
        print("=" * 50)
        for user_data in initial_users:
            print(f"Email: {user_data['email']}")
            print(f"Password: {user_data['password']}")
            print(f"Role: {user_data['role']}")
            print("-" * 30)

        return True

    except Exception as e:
        print(f"❌ Error creating users: {e}")
        return False
    finally:
        database.dispose()


if __name__ == "__main__":
    success = create_initial_users()
    sys.exit(0 if success else 1)
