"""
Dependency Injection Container

Centralized wiring for the archive services using dependency-injector.

Design:
- Services are singletons (one instance per process)
- Dependencies injected via constructor
- Lazy initialization (created on first use)
"""
from dependency_injector import containers, providers
from django.conf import settings


def create_dicom_service_provider(**kwargs):
    """Build the DICOM listener, importing pynetdicom only when it is first requested."""
    from pacs.controllers.dicom.dicom_scp import DicomServiceProvider
    return DicomServiceProvider(**kwargs)


class Container(containers.DeclarativeContainer):
    """
    Main DI Container for the pacs application.

    Manages lifecycle and dependencies for:
    - Storage (hierarchy sync)
    - Importing (worker, bounded executor, registry)
    - Query (matcher)
    - DICOM (handlers, service provider)
    """

    config = providers.Configuration()

    # ============================================================================
    # Storage (controllers/storage/)
    # ============================================================================

    hierarchy_sync = providers.Singleton(
        'pacs.controllers.storage.HierarchySync',
        max_retries=config.sync_max_retries
    )

    # ============================================================================
    # Importing (controllers/importing/)
    # ============================================================================

    import_worker = providers.Singleton(
        'pacs.controllers.importing.ImportWorker',
        hierarchy_sync=hierarchy_sync,
        progress_every=config.import_progress_every
    )

    import_executor = providers.Singleton(
        'pacs.controllers.importing.BoundedExecutor',
        max_workers=config.import_workers,
        backlog=config.import_backlog,
        submit_timeout=config.import_submit_timeout
    )

    import_registry = providers.Singleton(
        'pacs.controllers.importing.ImportRegistry',
        worker=import_worker,
        executor=import_executor
    )

    # ============================================================================
    # Query (controllers/dicom/query_handlers/)
    # ============================================================================

    query_matcher = providers.Singleton(
        'pacs.controllers.dicom.query_handlers.QueryMatcher'
    )

    # ============================================================================
    # DICOM (controllers/dicom/)
    # ============================================================================

    find_handler = providers.Singleton(
        'pacs.controllers.dicom.handlers.FindHandler',
        matcher=query_matcher
    )

    store_handler = providers.Singleton(
        'pacs.controllers.dicom.handlers.StoreHandler',
        hierarchy_sync=hierarchy_sync,
        storage_dir=config.storage_dir
    )

    dicom_service_provider = providers.Singleton(
        create_dicom_service_provider,
        find_handler=find_handler,
        store_handler=store_handler,
        port=config.port,
        ae_title=config.ae_title,
        bind_address=config.bind_address
    )


def setup_container() -> Container:
    """
    Setup and configure the DI container with Django settings.

    Returns:
        Configured Container instance with all settings loaded
    """
    container = Container()

    container.config.ae_title.from_value(settings.DICOM_AE_TITLE)
    container.config.port.from_value(settings.DICOM_PORT)
    container.config.bind_address.from_value(settings.DICOM_BIND_ADDRESS)
    container.config.storage_dir.from_value(settings.PACS_STORAGE_DIR)

    container.config.import_workers.from_value(settings.PACS_IMPORT_WORKERS)
    container.config.import_backlog.from_value(settings.PACS_IMPORT_BACKLOG)
    container.config.import_submit_timeout.from_value(settings.PACS_IMPORT_SUBMIT_TIMEOUT)
    container.config.import_progress_every.from_value(settings.PACS_IMPORT_PROGRESS_EVERY)
    container.config.sync_max_retries.from_value(settings.PACS_SYNC_MAX_RETRIES)

    return container


container = setup_container()


def get_import_registry():
    """Get the process-wide ImportRegistry."""
    return container.import_registry()
