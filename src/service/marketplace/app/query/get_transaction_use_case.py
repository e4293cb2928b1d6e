from typing import Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser


class GetTransactionUseCase:
    def __init__(self, *, transaction_query_repo: ITransactionQueryRepo) -> None:
        self.transaction_query_repo = transaction_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        transaction_query_repo: ITransactionQueryRepo = Depends(
            Provide[Container.transaction_query_repo]
        ),
    ) -> Self:
        return cls(transaction_query_repo=transaction_query_repo)

    @Logger.io
    async def get_detail(self, *, transaction_id: uuid.UUID, user: AuthenticatedUser) -> dict:
        """Transaction with its items and event title; visible to its buyer and to admins"""
        detail = await self.transaction_query_repo.get_detail(transaction_id=transaction_id)
        if detail is None:
            raise NotFoundError('Transaction not found')
        if detail['user_id'] != user.id and not user.is_admin:
            raise ForbiddenError('You can only view your own transactions')
        return detail
