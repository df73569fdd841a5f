import logging

from hourbook.core.config import settings
from hourbook.application.ports.booking_repository import BookingRepositoryPort
from hourbook.application.ports.document_store import DocumentStorePort
from hourbook.application.use_cases.booking_service import BookingService
from hourbook.application.use_cases.booking_store import BookingStore
from hourbook.application.use_cases.config_loader import ConfigLoader
from hourbook.application.use_cases.instance_config import InstanceConfigService
from hourbook.infrastructure.remote.bookings_api import BookingsApiClient
from hourbook.infrastructure.store.json_store import JsonDocumentStore
from hourbook.infrastructure.store.local_store import LocalBookingRepository
from hourbook.infrastructure.store.memory_store import MemoryDocumentStore


_document_store: DocumentStorePort | None = None


# server side


def get_document_store() -> DocumentStorePort:
    global _document_store
    if _document_store is None:
        if settings.STORE_PROVIDER.lower() == "memory":
            _document_store = MemoryDocumentStore()
        else:
            _document_store = JsonDocumentStore(data_dir=settings.DATA_DIR)
    return _document_store


def get_booking_service() -> BookingService:
    return BookingService(store=get_document_store(), instance_slug=settings.INSTANCE_SLUG)


def get_instance_config_service() -> InstanceConfigService:
    return InstanceConfigService(store=get_document_store(), instance_slug=settings.INSTANCE_SLUG)


# client side


def get_booking_repository() -> BookingRepositoryPort:
    logger = logging.getLogger(__name__)
    if settings.USE_API:
        logger.info("Using hosted bookings API at %s", settings.API_BASE_URL)
        return BookingsApiClient(base_url=settings.API_BASE_URL, timeout=settings.API_TIMEOUT_SECONDS)
    logger.info("Using on-device bookings file %s", settings.LOCAL_BOOKINGS_PATH)
    return LocalBookingRepository(path=settings.LOCAL_BOOKINGS_PATH)


def get_booking_store(repository: BookingRepositoryPort | None = None) -> BookingStore:
    return BookingStore(
        repository=repository or get_booking_repository(),
        poll_interval=settings.POLL_INTERVAL_SECONDS,
    )


def get_config_loader(repository: BookingRepositoryPort | None = None) -> ConfigLoader:
    return ConfigLoader(repository=repository or get_booking_repository(), instance_slug=settings.INSTANCE_SLUG)


def get_container() -> dict[str, object]:
    repository = get_booking_repository()
    return {
        "repository": repository,
        "store": get_booking_store(repository),
        "config_loader": get_config_loader(repository),
    }
