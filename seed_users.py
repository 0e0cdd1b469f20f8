"""
seed_users.py
─────────────
Creates the first coordinator and monitor accounts with bcrypt-hashed
passwords. Run ONCE after the migration:

    python seed_users.py

Reads from .env: change SEED_* values there, or edit defaults below.
"""
import asyncio
import os
from dotenv import load_dotenv

load_dotenv()

# ── Change these in .env or edit here ────────────────────────────────
SEED_USERS = [
    (
        os.getenv("SEED_COORDINATOR_NAME",  "Coordinator"),
        os.getenv("SEED_COORDINATOR_EMAIL", "coordinator@escola.edu.br"),
        os.getenv("SEED_COORDINATOR_PASSWORD", "ChangeMe@2025"),
        "COORDINATOR",
    ),
    (
        os.getenv("SEED_MONITOR_NAME",  "Monitor"),
        os.getenv("SEED_MONITOR_EMAIL", "monitor@escola.edu.br"),
        os.getenv("SEED_MONITOR_PASSWORD", "ChangeMe@2025"),
        "MONITOR",
    ),
]
# ─────────────────────────────────────────────────────────────────────


async def seed():
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
    from sqlalchemy import select
    from app.core.security import hash_password
    from app.models.user import User, UserRole

    engine  = create_async_engine(os.environ["DATABASE_URL"], echo=False)
    Session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with Session() as db:
        for name, email, password, role in SEED_USERS:
            email = email.strip().lower()
            existing = (await db.execute(
                select(User).where(User.email == email)
            )).scalar_one_or_none()

            if existing:
                print(f"⚠️  User already exists: {email}, no changes made.")
                continue

            user = User(
                name=name,
                email=email,
                role=UserRole(role),
                password_hash=hash_password(password),
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            print(f"✅  Created {role.lower()} {user.email} (id {user.id})")

    await engine.dispose()

    print()
    print("🔑  Login endpoint : POST /api/auth/login")
    print("⚠️   Change the passwords after first login!")


if __name__ == "__main__":
    asyncio.run(seed())
