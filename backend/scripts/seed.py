#!/usr/bin/env python3
"""
Seed script to generate a demo board.

Creates a user, a project owned by that user, and N tasks spread across
the three columns. Every task goes through the position engine, so the
resulting columns are densely numbered.

Usage:
    python -m scripts.seed [--tasks 60] [--clear]

Options:
    --tasks N    Number of tasks to create (default: 60)
    --clear      Clear existing data before seeding
    --project    Name of the project to create
    --owner      Identity uid to own the project
"""

import argparse
import asyncio
import random
import time

from sqlalchemy import func, text
from sqlmodel import select

from lanes.database import async_session_maker, init_db
from lanes.models import Membership, Project, Task, TaskPriority, TaskStatus, User, STATUS_ORDER
from lanes.roles import Role
from lanes.services.positions import audit_positions, insert_task


async def clear_data():
    """Clear all existing data."""
    print("Clearing existing data...")
    async with async_session_maker() as session:
        for table in ("invitations", "tasks", "project_memberships", "projects", "users"):
            await session.execute(text(f"DELETE FROM {table}"))
        await session.commit()
    print("Data cleared.")


async def ensure_owner(uid: str) -> User:
    async with async_session_maker() as session:
        user = await session.get(User, uid)
        if user is None:
            user = User(id=uid, email=f"{uid}@example.com", display_name=uid.title())
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user


async def create_project(name: str, owner: User) -> Project:
    """Create a project and its owner's ADMIN membership in one transaction."""
    async with async_session_maker() as session:
        project = Project(name=name, description="Demo board", created_by=owner.id)
        session.add(project)
        await session.flush()
        session.add(Membership(project_id=project.id, user_id=owner.id, role=Role.ADMIN))
        await session.commit()
        await session.refresh(project)
        return project


async def generate_tasks(project: Project, owner: User, num_tasks: int) -> None:
    """Append tasks to random columns, 20 per transaction."""
    batch_size = 20
    print(f"Creating {num_tasks} tasks...")

    for start in range(0, num_tasks, batch_size):
        async with async_session_maker() as session:
            for i in range(start, min(start + batch_size, num_tasks)):
                task = Task(
                    title=f"Task {i:03d}",
                    description=f"Seeded task {i}",
                    priority=random.choice(list(TaskPriority)),
                    status=random.choice(STATUS_ORDER),
                    project_id=project.id,
                    created_by=owner.id,
                )
                await insert_task(session, task)
            await session.commit()


async def get_stats(project: Project) -> None:
    """Print task counts per column and any density violations."""
    async with async_session_maker() as session:
        result = await session.execute(
            select(Task.status, func.count())
            .where(Task.project_id == project.id)
            .group_by(Task.status)
        )
        counts = {status: count for status, count in result.all()}

        reports = await audit_positions(session, project.id)

    print(f"\n=== Board Statistics ===")
    for status in STATUS_ORDER:
        print(f"{status.value:<12} {counts.get(status, 0)}")
    print(f"Columns with gaps: {len(reports)}")


async def main():
    parser = argparse.ArgumentParser(description="Seed the database with a demo board")
    parser.add_argument("--tasks", type=int, default=60, help="Number of tasks to create")
    parser.add_argument("--clear", action="store_true", help="Clear existing data first")
    parser.add_argument("--project", type=str, default="Demo Board", help="Project name")
    parser.add_argument("--owner", type=str, default="seed-user", help="Owner uid")

    args = parser.parse_args()

    print(f"=== Lanes Seed Script ===")

    await init_db()

    if args.clear:
        await clear_data()

    owner = await ensure_owner(args.owner)
    project = await create_project(args.project, owner)
    print(f"Created project: {project.name} ({project.id})")

    start_time = time.time()
    await generate_tasks(project, owner, args.tasks)
    print(f"Insert time: {time.time() - start_time:.2f}s")

    await get_stats(project)

    print(f"\n=== Seeding Complete ===")
    print(f"Project ID: {project.id}")


if __name__ == "__main__":
    asyncio.run(main())
