"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.marketplace.domain.entity.transaction_entity import TransactionLifecyclePolicy
from src.service.marketplace.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.marketplace.driven_adapter.repo.profile_query_repo_impl import (
    ProfileQueryRepoImpl,
)
from src.service.marketplace.driven_adapter.repo.promotion_query_repo_impl import (
    PromotionQueryRepoImpl,
)
from src.service.marketplace.driven_adapter.repo.transaction_query_repo_impl import (
    TransactionQueryRepoImpl,
)
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager, engine follows the running event loop)
    database = providers.Singleton(Database)

    # A fresh UoW per consumer; each `async with` opens its own session
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork,
        session_maker=database.provided.session_maker.call(),
    )

    lifecycle_policy = providers.Singleton(
        TransactionLifecyclePolicy,
        rejection_releases_seats=config_service.provided.REJECTION_RELEASES_SEATS,
    )

    # Read-side repositories (stateless - use session_factory per call)
    event_query_repo = providers.Singleton(
        EventQueryRepoImpl, session_factory=database.provided.session
    )
    transaction_query_repo = providers.Singleton(
        TransactionQueryRepoImpl, session_factory=database.provided.session
    )
    promotion_query_repo = providers.Singleton(
        PromotionQueryRepoImpl, session_factory=database.provided.session
    )
    profile_query_repo = providers.Singleton(
        ProfileQueryRepoImpl, session_factory=database.provided.session
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def cleanup() -> None:
    container.reset_singletons()
