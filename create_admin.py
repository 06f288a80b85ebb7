import sys
from datetime import datetime, timezone
import psycopg2
from app.core.security import hash_password
from app.core.config import settings
from app.core.enums import UserRole
from urllib.parse import urlparse


def create_user(username: str, password: str, role: UserRole = UserRole.ADMIN) -> bool:
    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )
    except psycopg2.Error as e:
        print(f"Error connecting to database: {e}")
        return False

    try:
        with conn, conn.cursor() as cursor:
            cursor.execute("SELECT id FROM users WHERE username = %s", (username,))
            if cursor.fetchone():
                print(f"Error: User '{username}' already exists")
                return False

            now = datetime.now(timezone.utc)
            cursor.execute(
                "INSERT INTO users (username, password_hash, role, created_at, updated_at) "
                "VALUES (%s, %s, %s, %s, %s) RETURNING id",
                (username, hash_password(password), role.name, now, now)
            )
            user_id = cursor.fetchone()[0]

        print(f"User '{username}' created successfully")
        print(f"User ID: {user_id}")
        print(f"Role: {role.value}")
        return True

    except psycopg2.Error as e:
        print(f"Error creating user: {e}")
        return False
    finally:
        conn.close()


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <username> <password> [ADMIN|STAFF]")
        sys.exit(1)

    username = sys.argv[1]
    password = sys.argv[2]

    if not username or not password:
        print("Error: username and password cannot be empty")
        sys.exit(1)

    try:
        role = UserRole(sys.argv[3].upper()) if len(sys.argv) > 3 else UserRole.ADMIN
    except ValueError:
        print(f"Error: unknown role '{sys.argv[3]}'")
        sys.exit(1)

    success = create_user(username, password, role)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
