"""Project-level access checks shared by documents and reports."""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import User
from src.core.exceptions import AuthorizationError
from src.modules.projects.models import ProjectMember


def assigned_project_ids(user: User) -> Select:
    """Subquery of project ids the user is assigned to."""
    return select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)


async def has_project_access(db: AsyncSession, user: User, project_id: int) -> bool:
    """ADMIN sees every project; everyone else only assigned ones."""
    if user.is_admin:
        return True
    member_id = await db.scalar(
        select(ProjectMember.id).where(
            ProjectMember.user_id == user.id,
            ProjectMember.project_id == project_id,
        )
    )
    return member_id is not None


async def ensure_project_access(db: AsyncSession, user: User, project_id: int) -> None:
    if not await has_project_access(db, user, project_id):
        raise AuthorizationError("No access to this project")
