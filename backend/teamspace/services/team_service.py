"""
Teamspace Backend — Team Service (Rosters and Bootstrap)
==========================================================

What:  Finds or creates the caller's team, seeds sample teammates, and lists
       the roster with profile fields.
Who:   /api/teams routes directly; EventService and MessagingService routes
       call `ensure_team_with_samples` before touching team-scoped data.

Bootstrap (first visit to any team-scoped page):
    1. Lock the caller's user row (SELECT ... FOR UPDATE)
    2. No team membership → create "<First Last>'s Team", caller joins as admin
    3. Roster of one → add Bob, Carol and David (created on first use), then
       re-assert the caller as admin

Concurrency:
    Everything runs in the request transaction. The row lock serializes two
    concurrent first requests from the same user, so the second one sees the
    team the first created. Sample users are shared across teams, so their
    inserts run in a savepoint and a unique-email collision with another
    user's bootstrap falls back to re-reading the committed row.
    SQLite ignores FOR UPDATE; tests are single-connection anyway.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.exceptions import NotFoundError
from teamspace.models.team import Team, TeamMember
from teamspace.models.user import User
from teamspace.schemas.team import CurrentTeamResponse, TeamMemberResponse, TeamResponse
from teamspace.services.user_service import user_service

logger = logging.getLogger(__name__)

FALLBACK_TEAM_NAME = "Personal Team"
DEFAULT_TEAM_DESCRIPTION = "Auto-generated team"

SAMPLE_MEMBER_PASSWORD = "password123"
SAMPLE_MEMBERS = [
    {
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.sample@workspace.local",
        "job_title": "Frontend Developer",
        "location": "Remote",
    },
    {
        "first_name": "Carol",
        "last_name": "Davis",
        "email": "carol.sample@workspace.local",
        "job_title": "UX Researcher",
        "location": "Austin, TX",
    },
    {
        "first_name": "David",
        "last_name": "Wilson",
        "email": "david.sample@workspace.local",
        "job_title": "Backend Engineer",
        "location": "New York, NY",
    },
]


def default_team_name(user: User) -> str:
    full_name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return f"{full_name}'s Team" if full_name else FALLBACK_TEAM_NAME


class TeamService:

    async def find_by_user_id(self, db: AsyncSession, user_id: int) -> Optional[Team]:
        """The user's first team by join order."""
        result = await db.execute(
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.team_id)
            .where(TeamMember.user_id == user_id)
            .order_by(TeamMember.joined_at.asc(), Team.team_id.asc())
            .limit(1)
        )
        return result.scalars().first()

    async def add_member(
        self,
        db: AsyncSession,
        team_id: int,
        user_id: int,
        role: str = "member",
    ) -> None:
        """Insert, or update the role when the user is already on the roster."""
        result = await db.execute(
            select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        )
        membership = result.scalar_one_or_none()
        if membership is None:
            db.add(TeamMember(team_id=team_id, user_id=user_id, role=role))
        else:
            membership.role = role
        await db.flush()

    async def count_members(self, db: AsyncSession, team_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(TeamMember).where(TeamMember.team_id == team_id)
        )
        return result.scalar_one()

    async def ensure_default_team(self, db: AsyncSession, user_id: int) -> Optional[Team]:
        """
        Returns the caller's team, creating it if needed.

        None when the user row does not exist.
        """
        result = await db.execute(
            select(User).where(User.user_id == user_id).with_for_update()
        )
        user = result.scalar_one_or_none()
        if user is None:
            return None

        team = await self.find_by_user_id(db, user_id)
        if team is not None:
            return team

        team = Team(
            name=default_team_name(user),
            description=DEFAULT_TEAM_DESCRIPTION,
            created_by=user_id,
        )
        db.add(team)
        await db.flush()
        await self.add_member(db, team.team_id, user_id, role="admin")

        logger.info("Created default team %s for user %s", team.team_id, user_id)
        return team

    async def get_or_create_sample_user(self, db: AsyncSession, sample: dict) -> User:
        """
        Sample teammates are shared by every team, so two first visits from
        different users can race to insert the same email. The insert runs in
        a savepoint; on a unique-email collision the savepoint rolls back and
        the row the other request committed is returned instead.
        """
        member = await user_service.find_by_email(db, sample["email"])
        if member is not None:
            return member

        try:
            async with db.begin_nested():
                return await user_service.create_user(
                    db, password=SAMPLE_MEMBER_PASSWORD, **sample
                )
        except IntegrityError:
            member = await user_service.find_by_email(db, sample["email"])
            if member is None:
                raise
            logger.info("Sample user %s was created concurrently; reusing it", sample["email"])
            return member

    async def ensure_sample_members(self, db: AsyncSession, team_id: int, owner_id: int) -> None:
        """Populates a roster of one with three sample teammates."""
        if await self.count_members(db, team_id) > 1:
            return

        for sample in SAMPLE_MEMBERS:
            member = await self.get_or_create_sample_user(db, sample)
            await self.add_member(db, team_id, member.user_id, role="member")

        await self.add_member(db, team_id, owner_id, role="admin")
        logger.info("Seeded sample members into team %s", team_id)

    async def ensure_team_with_samples(self, db: AsyncSession, user_id: int) -> Team:
        """
        Raises:
            NotFoundError: the caller's user row is gone (→ 404 "Team not found")
        """
        team = await self.ensure_default_team(db, user_id)
        if team is None:
            raise NotFoundError(resource="team", message="Team not found")
        await self.ensure_sample_members(db, team.team_id, user_id)
        return team

    async def get_members(self, db: AsyncSession, team_id: int) -> List[TeamMemberResponse]:
        """Roster joined with profile fields, earliest joiner first."""
        result = await db.execute(
            select(TeamMember, User)
            .join(User, User.user_id == TeamMember.user_id)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.joined_at.asc(), TeamMember.team_member_id.asc())
        )
        return [
            TeamMemberResponse(
                team_member_id=membership.team_member_id,
                team_id=membership.team_id,
                user_id=membership.user_id,
                role=membership.role,
                joined_at=membership.joined_at,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                pfp_url=user.pfp_url,
                job_title=user.job_title,
            )
            for membership, user in result.all()
        ]

    async def get_current_team(self, db: AsyncSession, user_id: int) -> CurrentTeamResponse:
        team = await self.ensure_team_with_samples(db, user_id)
        members = await self.get_members(db, team.team_id)
        return CurrentTeamResponse(team=TeamResponse.model_validate(team), members=members)


# ── Singleton Instance ────────────────────────────────────────────────────
team_service = TeamService()
