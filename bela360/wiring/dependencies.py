from datetime import datetime
from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from sqlalchemy.orm import sessionmaker

from bela360.application.ports.conversation_store import ConversationStorePort
from bela360.application.ports.key_value_store import KeyValueStorePort
from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.core.config import settings
from bela360.infrastructure.database.session import build_engine, build_session_factory, create_schema
from bela360.infrastructure.database.sql_repositories import (
    SqlAppointmentRepository,
    SqlServiceRepository,
    SqlWorkingHoursRepository,
)
from bela360.infrastructure.store.kv_conversation_store import KeyValueConversationStore
from bela360.infrastructure.store.memory_store import MemoryKeyValueStore
from bela360.infrastructure.store.redis_store import RedisKeyValueStore, build_redis_client


logger = logging.getLogger(__name__)


@lru_cache
def get_session_factory() -> sessionmaker:
    engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    if settings.ENV.lower() in {"dev", "local"}:
        create_schema(engine)
    return build_session_factory(engine)


@lru_cache
def get_key_value_store() -> KeyValueStorePort:
    if not settings.REDIS_URL:
        if settings.ENV.lower() not in {"dev", "local"}:
            logger.warning("REDIS_URL not set, conversation state is process-local")
        return MemoryKeyValueStore()
    return RedisKeyValueStore(build_redis_client(settings.REDIS_URL))


def get_availability_engine() -> AvailabilityEngine:
    session_factory = get_session_factory()
    return AvailabilityEngine(
        services=SqlServiceRepository(session_factory),
        working_hours=SqlWorkingHoursRepository(session_factory),
        appointments=SqlAppointmentRepository(session_factory),
        slot_interval_minutes=settings.SLOT_INTERVAL_MINUTES,
        max_days_ahead=settings.AVAILABLE_DATES_MAX_DAYS,
    )


def get_conversation_store() -> ConversationStorePort:
    return KeyValueConversationStore(
        kv=get_key_value_store(),
        ttl_seconds=settings.CONVERSATION_TTL_SECONDS,
        namespace=settings.CONVERSATION_KEY_NAMESPACE,
    )


def get_business_now() -> datetime:
    """Wall-clock time in the business timezone, as a naive datetime."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).replace(tzinfo=None)
