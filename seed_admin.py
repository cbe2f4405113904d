"""
seed_admin.py
─────────────
Creates the first admin account (a `users` row with role ADMIN plus its
`admins` profile) with a bcrypt-hashed password.
Run ONCE after the migrations:

    alembic upgrade head
    python seed_admin.py

Reads from .env - change SEED_ADMIN_* values there, or edit defaults below.
"""
import asyncio
import os
from dotenv import load_dotenv

load_dotenv()

# ── Change these in .env or edit here ────────────────────────────────
ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe@2025")
# ─────────────────────────────────────────────────────────────────────


async def seed():
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
    from sqlalchemy import select
    from app.core.security import hash_password
    from app.models import Admin, User, UserRole

    engine  = create_async_engine(os.environ["DATABASE_URL"], echo=False)
    Session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with Session() as db:
        # Check if already exists - idempotent
        existing = (await db.execute(
            select(User).where(User.username == ADMIN_USERNAME)
        )).scalar_one_or_none()

        if existing:
            print(f"⚠️  User already exists: {ADMIN_USERNAME}")
            print("   No changes made. To reset password, use the DB directly.")
            await engine.dispose()
            return

        user = User(
            username=ADMIN_USERNAME,
            password_hash=hash_password(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
        )
        admin = Admin(user=user, access_level=1, permissions=["all"])
        db.add(admin)
        await db.commit()
        await db.refresh(admin)

    await engine.dispose()

    print("\n✅  Admin created successfully!")
    print(f"    ID       : {admin.id}")
    print(f"    Username : {user.username}")
    print(f"    Hash     : {user.password_hash[:40]}...")
    print()
    print("🔑  Login endpoint : POST /api/login/admin")
    print(f'    Body           : {{"username": "{ADMIN_USERNAME}", "password": "{ADMIN_PASSWORD}"}}')
    print()
    print("⚠️   Change the password after first login!")


if __name__ == "__main__":
    asyncio.run(seed())
