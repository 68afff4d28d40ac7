"""
Process shutdown handling.

Stops the DICOM server and drains the import pool when the interpreter exits
or receives SIGTERM.
"""
import atexit
import logging
import signal
import threading

logger = logging.getLogger('pacs.signals')

_registered = False
_lock = threading.Lock()


def shutdown_services() -> None:
    from pacs.apps import PacsConfig
    from pacs.containers import container

    PacsConfig.shutdown_dicom_server()

    logger.info("Waiting for running imports to finish...")
    container.import_registry().shutdown(wait=True)


def _handle_sigterm(signum, frame):
    logger.info(f"Received signal {signum}, shutting down")
    shutdown_services()
    raise SystemExit(0)


def register_shutdown_handlers() -> None:
    """Register the atexit hook and SIGTERM handler once per process."""
    global _registered
    with _lock:
        if _registered:
            return
        _registered = True

    atexit.register(shutdown_services)
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, _handle_sigterm)
