"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/providers/selector.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.event.in_memory_broadcaster import InMemoryEventBroadcasterImpl
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.booking.domain.pricing.pricing_engine import PricingEngine
from src.service.booking.domain.slot_availability_resolver import SlotAvailabilityResolver
from src.service.booking.driven_adapter.memory.in_memory_query_repo_impl import (
    InMemoryBookingQueryRepoImpl,
    InMemoryOccupancyQueryRepoImpl,
    InMemoryOfferQueryRepoImpl,
    InMemoryTurfQueryRepoImpl,
)
from src.service.booking.driven_adapter.memory.in_memory_slot_hold_repo_impl import (
    InMemorySlotHoldCommandRepoImpl,
    InMemorySlotHoldQueryRepoImpl,
)
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore
from src.service.booking.driven_adapter.memory.in_memory_unit_of_work import (
    InMemoryBookingUnitOfWork,
)
from src.service.booking.driven_adapter.notification.webhook_notification_dispatcher_impl import (
    WebhookNotificationDispatcherImpl,
)
from src.service.booking.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.booking.driven_adapter.repo.booking_unit_of_work_impl import (
    AsyncpgBookingUnitOfWork,
)
from src.service.booking.driven_adapter.repo.occupancy_query_repo_impl import (
    OccupancyQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.offer_query_repo_impl import OfferQueryRepoImpl
from src.service.booking.driven_adapter.repo.slot_hold_repo_impl import (
    SlotHoldCommandRepoImpl,
    SlotHoldQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.turf_query_repo_impl import TurfQueryRepoImpl
from src.service.shared_kernel.driven_adapter.in_memory_turf_change_notifier_impl import (
    InMemoryTurfChangeNotifierImpl,
)
from src.service.shared_kernel.driven_adapter.pubsub_handler_impl import (
    PubSubTurfChangeNotifierImpl,
)
from src.service.shared_kernel.driven_adapter.system_clock import SystemClock


def _store_backend() -> str:
    return settings.STORE_BACKEND


def _change_channel_backend() -> str:
    return settings.CHANGE_CHANNEL_BACKEND


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    store_backend = providers.Callable(_store_backend)
    change_channel_backend = providers.Callable(_change_channel_backend)

    clock = providers.Singleton(SystemClock)

    # Domain services (stateless)
    slot_availability_resolver = providers.Singleton(SlotAvailabilityResolver)
    pricing_engine = providers.Singleton(PricingEngine)

    # In-memory store shared by every memory adapter
    in_memory_store = providers.Singleton(InMemoryBookingStore)

    # Repositories
    turf_query_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemoryTurfQueryRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(TurfQueryRepoImpl),
    )
    occupancy_query_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemoryOccupancyQueryRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(OccupancyQueryRepoImpl),
    )
    slot_hold_query_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemorySlotHoldQueryRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(SlotHoldQueryRepoImpl),
    )
    slot_hold_command_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemorySlotHoldCommandRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(SlotHoldCommandRepoImpl),
    )
    offer_query_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemoryOfferQueryRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(OfferQueryRepoImpl),
    )
    booking_query_repo = providers.Selector(
        store_backend,
        memory=providers.Singleton(InMemoryBookingQueryRepoImpl, store=in_memory_store),
        postgres=providers.Singleton(BookingQueryRepoImpl),
    )

    # Unit of work: a fresh instance per commit / cancel
    booking_unit_of_work = providers.Selector(
        store_backend,
        memory=providers.Factory(InMemoryBookingUnitOfWork, store=in_memory_store),
        postgres=providers.Factory(AsyncpgBookingUnitOfWork),
    )

    # Turf change channel (SSE fan-out)
    in_memory_broadcaster = providers.Singleton(InMemoryEventBroadcasterImpl)
    turf_change_notifier = providers.Selector(
        change_channel_backend,
        memory=providers.Singleton(
            InMemoryTurfChangeNotifierImpl, broadcaster=in_memory_broadcaster
        ),
        kvrocks=providers.Singleton(
            PubSubTurfChangeNotifierImpl,
            redis_client=providers.Factory(kvrocks_client.get_client),
        ),
    )

    # Operator notification webhook
    notification_dispatcher = providers.Singleton(WebhookNotificationDispatcherImpl)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
