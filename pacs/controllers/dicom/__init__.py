# DICOM module
# The network service provider lives in .dicom_scp and needs pynetdicom (the
# "scp" extra); it is imported lazily by pacs.containers.create_dicom_service_provider.
from .handlers import StoreHandler, FindHandler

__all__ = [
    'StoreHandler',
    'FindHandler',
]
