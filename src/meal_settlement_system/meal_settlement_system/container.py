from __future__ import annotations

from dataclasses import dataclass

from .access.policy import AccessPolicy
from .children.mysql_child_repository import MySQLChildRepository
from .children.repository import ChildRepository
from .core.constants import DEFAULT_CANCELLATION_CUTOFF_HOUR
from .database.connection import DBConfig, DatabaseConnection
from .meals.deadline import CancellationDeadlinePolicy
from .meals.mysql_meal_cancellation_repository import MySQLMealCancellationRepository
from .meals.repository import MealCancellationRepository
from .meals.service import MealCancellationService
from .pricing.mysql_group_repository import MySQLGroupRepository
from .pricing.repository import GroupRepository
from .pricing.resolver import PriceResolver
from .settlements.mysql_settlement_repository import MySQLSettlementRepository
from .settlements.repository import SettlementStore
from .settlements.service import SettlementService


@dataclass(frozen=True)
class Container:
    children_repo: ChildRepository
    groups_repo: GroupRepository
    cancellations_repo: MealCancellationRepository
    settlement_store: SettlementStore

    access_policy: AccessPolicy
    price_resolver: PriceResolver
    meal_cancellation_service: MealCancellationService
    settlement_service: SettlementService


def build_services(
    *,
    children_repo: ChildRepository,
    groups_repo: GroupRepository,
    cancellations_repo: MealCancellationRepository,
    settlement_store: SettlementStore,
    cutoff_hour: int = DEFAULT_CANCELLATION_CUTOFF_HOUR,
) -> Container:
    access_policy = AccessPolicy(children_repo)
    price_resolver = PriceResolver(groups_repo)
    meal_cancellation_service = MealCancellationService(
        cancellations_repo,
        children_repo,
        access_policy,
        price_resolver,
        deadline=CancellationDeadlinePolicy(cutoff_hour=int(cutoff_hour)),
    )
    settlement_service = SettlementService(cancellations_repo, settlement_store, access_policy)

    return Container(
        children_repo=children_repo,
        groups_repo=groups_repo,
        cancellations_repo=cancellations_repo,
        settlement_store=settlement_store,
        access_policy=access_policy,
        price_resolver=price_resolver,
        meal_cancellation_service=meal_cancellation_service,
        settlement_service=settlement_service,
    )


def build_container(*, db_config: dict, cutoff_hour: int = DEFAULT_CANCELLATION_CUTOFF_HOUR) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        children_repo=MySQLChildRepository(conn),
        groups_repo=MySQLGroupRepository(conn),
        cancellations_repo=MySQLMealCancellationRepository(conn),
        settlement_store=MySQLSettlementRepository(conn),
        cutoff_hour=cutoff_hour,
    )
