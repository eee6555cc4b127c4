"""
Seed script: creates an admin, a demo team with its manager and two members,
and prints an access token per user.

Usage (inside container):
    python -m timekeeper.db.seed
"""

import asyncio

from sqlalchemy import select

from timekeeper.core.config import settings
from timekeeper.core.security import create_access_token
from timekeeper.db.models import Team, User, UserTeam
from timekeeper.db.session import AsyncSessionLocal


async def get_or_create_user(session, email: str, full_name: str, is_admin: bool = False) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User {email} already exists, skipping.")
        return user

    user = User(email=email, full_name=full_name, is_admin=is_admin)
    session.add(user)
    await session.flush()
    print(f"Created user {email}: id={user.id}")
    return user


async def create_demo_team(session, manager: User, members: list[User]) -> Team:
    result = await session.execute(select(Team).where(Team.name == "Demo"))
    team = result.scalar_one_or_none()
    if team:
        print("Demo team already exists, skipping.")
        return team

    team = Team(
        name="Demo",
        description="Seeded team, 9:00-17:00",
        manager_id=manager.id,
        start_hour=9,
        end_hour=17,
        timezone=settings.DEFAULT_TIMEZONE,
    )
    session.add(team)
    await session.flush()
    for member in members:
        session.add(UserTeam(user_id=member.id, team_id=team.id))
    await session.flush()
    print(f"Created team Demo: id={team.id} ({len(members)} members)")
    return team


async def main():
    async with AsyncSessionLocal() as session:
        async with session.begin():
            admin = await get_or_create_user(session, "admin@example.com", "Admin", is_admin=True)
            manager = await get_or_create_user(session, "manager@example.com", "Team Manager")
            alice = await get_or_create_user(session, "alice@example.com", "Alice Martin")
            bob = await get_or_create_user(session, "bob@example.com", "Bob Durand")
            await create_demo_team(session, manager, [alice, bob])

    for user in (admin, manager, alice, bob):
        token = create_access_token({"sub": str(user.id), "admin": user.is_admin})
        print(f"{user.email}: {token}")
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(main())
