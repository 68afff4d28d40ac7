# DICOM Handlers package
from .store_handler import StoreHandler
from .find_handler import FindHandler

__all__ = [
    'StoreHandler',
    'FindHandler',
]
