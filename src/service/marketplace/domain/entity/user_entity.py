from enum import Enum
import uuid

import attrs


class UserRole(str, Enum):
    CUSTOMER = 'customer'
    EVENT_ORGANIZER = 'event_organizer'
    ADMIN = 'admin'


@attrs.define
class AuthenticatedUser:
    """Caller resolved from a verified bearer token plus the role stored in its profile."""

    id: uuid.UUID
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
