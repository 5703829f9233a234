#!/usr/bin/env python
"""
Seed data script for development and testing.

Usage:
    python scripts/seed_data.py

This script creates:
- Sample citizen accounts (solver and admin rights come from the shared
  SOLVER_TOKEN and ADMIN_SECRET at login, not from the account)
- Sample issues with various statuses and locations
- Points, levels and badges matching each reporter's submissions
- Sample endorsements
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from civic_reporter.core.gamification import apply_submission, evaluate
from civic_reporter.core.security import hash_password
from civic_reporter.database import async_session_maker, init_db
from civic_reporter.models.account import Account, AccountRole
from civic_reporter.models.issue import Issue, IssueStatus


# Seed data
ACCOUNTS = [
    {
        "email": "admin@example.com",
        "password": "AdminPass123!",
        "role": AccountRole.ADMIN,
    },
    {
        "email": "roads.solver@example.com",
        "password": "SolverPass123!",
        "role": AccountRole.SOLVER,
        "department": "Roads",
    },
    {
        "email": "asha@example.com",
        "password": "CitizenPass123!",
        "role": AccountRole.CITIZEN,
    },
    {
        "email": "ravi@example.com",
        "password": "CitizenPass123!",
        "role": AccountRole.CITIZEN,
    },
    {
        "email": "meera@example.com",
        "password": "CitizenPass123!",
        "role": AccountRole.CITIZEN,
    },
]

ISSUES = [
    {
        "title": "Deep pothole near the bus stop",
        "location": "12.9716,77.5946",
        "status": IssueStatus.PENDING,
        "department": "Roads",
    },
    {
        "title": "Streetlight out on 3rd Cross",
        "location": "12.9352,77.6245",
        "status": IssueStatus.IN_PROGRESS,
        "department": "Electrical",
    },
    {
        "title": "Garbage not collected for a week",
        "location": "12.9784,77.6408",
        "status": IssueStatus.PENDING,
        "department": "Sanitation",
    },
    {
        "title": "Water pipe leaking onto the footpath",
        "location": "12.9141,77.6101",
        "status": IssueStatus.RESOLVED,
        "department": "Water",
    },
    {
        "title": "Fallen tree blocking the lane",
        "location": "Behind the public library",
        "status": IssueStatus.PENDING,
        "department": None,
    },
    {
        "title": "Broken footpath tiles",
        "location": "12.9600,77.5800",
        "status": IssueStatus.IN_PROGRESS,
        "department": "Roads",
    },
    {
        "title": "Open drain next to the school",
        "location": "12.9900,77.5500",
        "status": IssueStatus.PENDING,
        "department": "Sanitation",
    },
]


async def seed_database():
    """Seed the database with sample data."""
    print("Initializing database...")
    await init_db()

    async with async_session_maker() as session:
        # Check if data already exists
        result = await session.execute(select(Account).limit(1))
        if result.scalar_one_or_none():
            print("Database already seeded. Skipping...")
            return

        print("Creating accounts...")
        accounts = {}
        for account_data in ACCOUNTS:
            account = Account(
                email=account_data["email"],
                password_hash=hash_password(account_data["password"]),
                role=account_data["role"],
                department=account_data.get("department"),
            )
            session.add(account)
            accounts[account_data["email"]] = account

        await session.flush()

        print("Creating issues...")
        citizens = [a for a in accounts.values() if a.role == AccountRole.CITIZEN]
        states = {c.id: evaluate(0) for c in citizens}
        issues = []
        for i, issue_data in enumerate(ISSUES):
            reporter = citizens[i % len(citizens)]

            issue = Issue(
                title=issue_data["title"],
                location=issue_data["location"],
                status=issue_data["status"].value,
                department=issue_data["department"],
                reporter_id=reporter.id,
                endorsers=[],
            )
            session.add(issue)
            issues.append(issue)
            states[reporter.id] = apply_submission(states[reporter.id])

        for citizen in citizens:
            state = states[citizen.id]
            citizen.points = state.points
            citizen.level = state.level
            citizen.badges = state.badges

        await session.flush()

        print("Creating endorsements...")
        endorsement_count = 0
        for i, issue in enumerate(issues):
            # Every other citizen backs the issue
            for j, citizen in enumerate(citizens):
                if (i + j) % 2 == 0 and citizen.id != issue.reporter_id:
                    issue.endorsers.append(citizen)
                    endorsement_count += 1

        await session.commit()

        print("\n" + "=" * 50)
        print("Database seeded successfully!")
        print("=" * 50)
        print("\nCreated:")
        print(f"  - {len(ACCOUNTS)} accounts")
        print(f"  - {len(ISSUES)} issues")
        print(f"  - {endorsement_count} endorsements")
        print("\nDefault credentials:")
        print("  Admin:   admin@example.com / AdminPass123!  (plus ADMIN_SECRET)")
        print("  Solver:  roads.solver@example.com / SolverPass123!  (plus SOLVER_TOKEN)")
        print("  Citizen: asha@example.com / CitizenPass123!")


if __name__ == "__main__":
    asyncio.run(seed_database())
