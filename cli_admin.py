import argparse

from auth_service.database import create_session_factory
from auth_service.models import User
from auth_service.otp import PendingAction, clear_code
from auth_service.security import get_password_hash
from config import Config


def create_or_promote_admin(session_factory, name, email, password=None):
    """Create a verified admin, or promote the existing account for ``email``.

    Returns ``(user_id, created)``.
    """
    email = email.strip().lower()
    db = session_factory()
    try:
        user = db.query(User).filter(User.email == email).first()
        created = user is None
        if created:
            if not password:
                raise ValueError("A password is required to create a new admin")
            user = User(name=name or email.split("@")[0], email=email, password=get_password_hash(password))
            db.add(user)
        elif password:
            user.password = get_password_hash(password)

        user.role = "admin"
        user.is_active = True
        user.is_verified = True
        clear_code(user, PendingAction.VERIFICATION)
        db.commit()
        return user.id, created
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--email", type=str, required=True)
    parser.add_argument("--name", type=str, default="")
    parser.add_argument("--password", type=str, default=None)
    parser.add_argument("--database-url", type=str, default=Config.DATABASE_URL)
    args = parser.parse_args(argv)

    session_factory = create_session_factory(args.database_url)
    user_id, created = create_or_promote_admin(session_factory, args.name, args.email, args.password)

    action = "Created" if created else "Promoted"
    print(f"✅ {action} admin {args.email} (id={user_id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
