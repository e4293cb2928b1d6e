from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.marketplace.domain.entity.transaction_entity import TransactionStatus
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser


class ListTransactionsUseCase:
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
    async def list_for(
        self,
        *,
        user: AuthenticatedUser,
        status: Optional[str] = None,
        all_users: bool = False,
    ) -> List[dict]:
        """
        A customer only ever sees their own transactions. Admins pass
        ``all_users`` to get the confirmation queue across buyers.
        """
        if status:
            try:
                status = TransactionStatus(status).value
            except ValueError:
                raise ValidationError(
                    f'Unknown transaction status: {status}', details=[{'field': 'status'}]
                )

        user_id = None if (all_users and user.is_admin) else user.id
        details = await self.transaction_query_repo.list_details(user_id=user_id, status=status)
        Logger.base.info(f'[LIST_TRANSACTIONS] {len(details)} transaction(s) for {user.id}')
        return details
