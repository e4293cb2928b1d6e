from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.marketplace.app.interface.i_profile_query_repo import IProfileQueryRepo
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser, UserRole
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def can_create_event(user: AuthenticatedUser) -> bool:
        return user.role in (UserRole.EVENT_ORGANIZER, UserRole.ADMIN)

    @staticmethod
    def is_admin(user: AuthenticatedUser) -> bool:
        return user.role == UserRole.ADMIN


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    profile_query_repo: IProfileQueryRepo = Depends(Provide[Container.profile_query_repo]),
) -> AuthenticatedUser:
    token = credentials.credentials if credentials else None
    user_id = jwt_auth.verify(token)
    # Users without a profile row are plain customers
    role = await profile_query_repo.get_role(user_id=user_id) or UserRole.CUSTOMER
    return AuthenticatedUser(id=user_id, role=role)


async def require_organizer(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    if not RoleAuthStrategy.can_create_event(current_user):
        raise ForbiddenError('Only event organizers can perform this action')
    return current_user


async def require_admin(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={'user.id': str(current_user.id), 'user.role': current_user.role.value},
    ):
        if not RoleAuthStrategy.is_admin(current_user):
            raise ForbiddenError('Only admins can perform this action')
        return current_user
