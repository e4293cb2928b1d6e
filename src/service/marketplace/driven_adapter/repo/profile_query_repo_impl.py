from typing import AsyncContextManager, Callable, Optional
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_profile_query_repo import IProfileQueryRepo
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.driven_adapter.model.profile_model import ProfileModel


class ProfileQueryRepoImpl(IProfileQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_role(self, *, user_id: uuid.UUID) -> Optional[UserRole]:
        async with self.session_factory() as session:
            role = await session.scalar(
                select(ProfileModel.role).where(ProfileModel.user_id == user_id)
            )
        if role is None:
            return None
        try:
            return UserRole(role)
        except ValueError:
            Logger.base.warning(f'[AUTH] Unknown role {role!r} on profile {user_id}')
            return None
