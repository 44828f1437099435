"""
Set a user as administrator.

Usage:
    python scripts/set_admin.py <email>
    python scripts/set_admin.py qc@example.com --revoke
"""
import argparse
import asyncio
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from sqlalchemy import select

from app.models.user import User, UserRole
from app.services.audit import log_action
from app.services.database import SessionLocal, engine


async def set_admin(email: str, revoke: bool = False) -> int:
    async with SessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            print(
                f'User with email "{email}" does not exist.\n'
                f'Please ensure the user has signed in at least once.',
                file=sys.stderr,
            )
            return 1

        previous = user.role
        user.role = UserRole.ARTIST if revoke else UserRole.ADMIN
        log_action(
            session, action="SET_USER_ROLE", user_id=None, entity="user", entity_id=user.id,
            data={"from": previous.value, "to": user.role.value, "via": "set_admin"},
        )
        await session.commit()
        print(f"Successfully set {email} role: {previous.value} -> {user.role.value}")

    await engine.dispose()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Set a user as administrator by email")
    parser.add_argument("email", help="Email address of the user to set as administrator")
    parser.add_argument("--revoke", action="store_true", help="Demote the user back to ARTIST")
    args = parser.parse_args()
    sys.exit(asyncio.run(set_admin(args.email, args.revoke)))
