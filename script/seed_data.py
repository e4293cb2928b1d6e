#!/usr/bin/env python3
"""
Database Seed Script
Populate local data for manual testing of the marketplace API

Features:
1. Create Profiles - organizer, admin and customer rows in the profile table
2. Create Event - one event with VIP / Regular / Early Bird tiers
3. Create Promotion - EARLYBIRD voucher valid for the next 30 days
4. Print bearer tokens signed with SECRET_KEY for each profile

Notes:
- Tables must exist (alembic upgrade head, or AUTO_CREATE_TABLES=true)
- Identity lives with the external auth provider; only roles are stored here
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
import uuid

from sqlalchemy import func, select

from src.platform.config.di import container
from src.platform.database.orm_db_setting import dispose_engine, get_session_maker
from src.platform.types.uuid7 import new_uuid7
from src.service.marketplace.app.command.create_event_and_tiers_use_case import (
    CreateEventAndTiersUseCase,
)
from src.service.marketplace.domain.entity.event_entity import TierSpec
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel
from src.service.marketplace.driven_adapter.model.profile_model import ProfileModel
from src.service.marketplace.driven_adapter.model.promotion_model import PromotionModel
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


@dataclass
class ProfileConfig:
    label: str
    role: UserRole


TEST_PROFILES = [
    ProfileConfig(label='organizer', role=UserRole.EVENT_ORGANIZER),
    ProfileConfig(label='admin', role=UserRole.ADMIN),
    ProfileConfig(label='customer', role=UserRole.CUSTOMER),
]

TIERS = [
    TierSpec(name='VIP', price=1_500_000, seats=50),
    TierSpec(name='Regular', price=500_000, seats=300),
    TierSpec(name='Early Bird', price=350_000, seats=100),
]


async def create_profiles() -> dict[str, uuid.UUID]:
    print(f'👥 Creating {len(TEST_PROFILES)} profiles...')
    user_ids = {config.label: uuid.uuid4() for config in TEST_PROFILES}

    async with get_session_maker()() as session:
        session.add_all(
            [
                ProfileModel(user_id=user_ids[config.label], role=config.role.value)
                for config in TEST_PROFILES
            ]
        )
        await session.commit()

    for config in TEST_PROFILES:
        print(f'   ✅ {config.label}: user_id={user_ids[config.label]}')
    return user_ids


async def create_event(organizer_id: uuid.UUID) -> uuid.UUID:
    print('🎫 Creating initial event...')
    use_case = CreateEventAndTiersUseCase(uow=container.unit_of_work())
    event = await use_case.create(
        organizer_id=organizer_id,
        title='Jazz Night',
        description='An evening of live jazz',
        country='Indonesia',
        city='Jakarta',
        venue='Blue Note Hall',
        start_date=date.today() + timedelta(days=60),
        tiers=TIERS,
    )
    print(f'   ✅ Created event: ID={event.id}, capacity={event.capacity}')
    for tier in event.tiers:
        print(f'      Tier {tier.name}: ID={tier.id}, price={tier.unit_price}')
    return event.id


async def create_promotion(event_id: uuid.UUID) -> None:
    print('🏷️  Creating EARLYBIRD voucher...')
    today = datetime.now(timezone.utc).date()
    async with get_session_maker()() as session:
        session.add(
            PromotionModel(
                id=new_uuid7(),
                event_id=event_id,
                code='EARLYBIRD',
                discount_type='percent',
                discount_value=15,
                start_date=today,
                end_date=today + timedelta(days=30),
                status='active',
            )
        )
        await session.commit()
    print('   ✅ EARLYBIRD: 15% off until', today + timedelta(days=30))


async def verify_data() -> None:
    print('🔍 Verifying seeded data...')
    async with get_session_maker()() as session:
        for model in (ProfileModel, EventModel, TicketTierModel, PromotionModel):
            count = await session.scalar(select(func.count()).select_from(model))
            print(f'   {model.__tablename__} count: {count}')
    print('   ✅ Data verification completed!')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    try:
        user_ids = await create_profiles()
        print()
        event_id = await create_event(user_ids['organizer'])
        print()
        await create_promotion(event_id)
        print()
        await verify_data()

        print()
        print('=' * 50)
        print('🌱 Data seeding completed!')
        print('📋 Bearer tokens:')
        jwt_auth = JwtAuth()
        for config in TEST_PROFILES:
            print(f'   {config.label}: {jwt_auth.create_jwt_token(user_ids[config.label])}')

    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        exit(1)

    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())
