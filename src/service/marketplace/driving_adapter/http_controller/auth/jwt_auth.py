"""
Bearer token verification against the identity provider's shared secret
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
import uuid

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(self, user_id: uuid.UUID, *, expires_in: Optional[timedelta] = None) -> str:
        """Issue a token the way the identity provider does (local runs and tests)."""
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_id),
            'iat': now,
            'exp': now + (expires_in or timedelta(minutes=self.token_expire_minutes)),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={'require': ['sub', 'exp']},
            )
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def verify(self, token: Optional[str]) -> uuid.UUID:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)
        try:
            return uuid.UUID(str(payload['sub']))
        except ValueError:
            raise AuthenticationError('Invalid token')
