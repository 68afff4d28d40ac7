"""Shared fixtures: DICOM files generated with pydicom, fake import collaborators."""
import threading
from concurrent.futures import Future
from pathlib import Path
from types import SimpleNamespace

import pytest
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian, generate_uid

CT_IMAGE_STORAGE = '1.2.840.10008.5.1.4.1.1.2'

STUDY_UID = '1.2.826.0.1.3680043.8.498.1'
SERIES_UID_1 = '1.2.826.0.1.3680043.8.498.1.1'
SERIES_UID_2 = '1.2.826.0.1.3680043.8.498.1.2'


def make_dataset(**kwargs) -> Dataset:
    """Build a minimal CT image dataset; keyword arguments override or add attributes."""
    ds = Dataset()
    ds.SOPClassUID = CT_IMAGE_STORAGE
    ds.SOPInstanceUID = generate_uid()
    ds.PatientName = 'Doe^John'
    ds.PatientID = 'PAT001'
    ds.PatientBirthDate = '19800101'
    ds.PatientSex = 'M'
    ds.StudyInstanceUID = STUDY_UID
    ds.StudyDate = '20230601'
    ds.StudyTime = '120000'
    ds.StudyDescription = 'CHEST CT'
    ds.AccessionNumber = 'ACC001'
    ds.SeriesInstanceUID = SERIES_UID_1
    ds.SeriesNumber = 1
    ds.Modality = 'CT'
    ds.InstanceNumber = 1
    ds.ImageType = ['ORIGINAL', 'PRIMARY', 'AXIAL']
    ds.Rows = 4
    ds.Columns = 4

    for key, value in kwargs.items():
        if value is None:
            if key in ds:
                delattr(ds, key)
        else:
            setattr(ds, key, value)
    return ds


def make_file_meta(ds: Dataset) -> FileMetaDataset:
    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = ds.SOPClassUID
    file_meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian
    return file_meta


def write_dicom(path: Path, **kwargs) -> Path:
    """Write a Part 10 file (preamble + DICM marker) to path."""
    ds = make_dataset(**kwargs)
    ds.file_meta = make_file_meta(ds)
    ds.preamble = b'\0' * 128
    path.parent.mkdir(parents=True, exist_ok=True)
    ds.save_as(path, enforce_file_format=True)
    return path


@pytest.fixture
def dicom_file(tmp_path):
    """Factory fixture: dicom_file('sub/a.dcm', PatientName='X') -> Path."""
    def _make(relative: str = 'image.dcm', **kwargs) -> Path:
        return write_dicom(tmp_path / relative, **kwargs)
    return _make


class InlineExecutor:
    """Runs each submitted job immediately in the calling thread."""

    def __init__(self):
        self.shut_down = False

    def submit(self, fn, *args, **kwargs) -> Future:
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        self.shut_down = True


class BlockingWorker:
    """Import worker stand-in that holds every job until release is set."""

    def __init__(self):
        self.release = threading.Event()
        self.calls = []
        self._lock = threading.Lock()

    def run(self, info):
        with self._lock:
            self.calls.append(info.root_path)
        self.release.wait(5)
        info.mark_finished()
        return info


class RecordingWorker:
    """Import worker stand-in that finishes immediately."""

    def __init__(self):
        self.calls = []

    def run(self, info):
        self.calls.append(info.root_path)
        info.add_file_seen()
        info.mark_finished()
        return info


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def blocking_worker():
    worker = BlockingWorker()
    yield worker
    worker.release.set()


@pytest.fixture
def recording_worker():
    return RecordingWorker()


@pytest.fixture
def scu_assoc():
    """Association stand-in carrying the calling AE."""
    return SimpleNamespace(requestor=SimpleNamespace(ae_title='TESTSCU', address='127.0.0.1'))


@pytest.fixture
def populated_archive(db, tmp_path):
    """
    Three patients:
        Doe^John   PAT001 M  study 1.1 (CT, 2023-06-01) with two series
        Doe^Jane   PAT002 F  study 2.1 (MR, 2023-09-15)
        Smith^Doe  PAT010 M  study 3.1 (CT, 2022-01-20)
    """
    from pacs.controllers.storage import FileAttributes, HierarchySync

    sync = HierarchySync()
    files = [
        dict(PatientName='Doe^John', PatientID='PAT001', PatientSex='M',
             StudyInstanceUID='1.1', StudyDate='20230601', StudyDescription='CHEST CT',
             SeriesInstanceUID='1.1.1', SeriesNumber=1, Modality='CT', SOPInstanceUID='1.1.1.1'),
        dict(PatientName='Doe^John', PatientID='PAT001', PatientSex='M',
             StudyInstanceUID='1.1', StudyDate='20230601', StudyDescription='CHEST CT',
             SeriesInstanceUID='1.1.1', SeriesNumber=1, Modality='CT', SOPInstanceUID='1.1.1.2'),
        dict(PatientName='Doe^John', PatientID='PAT001', PatientSex='M',
             StudyInstanceUID='1.1', StudyDate='20230601', StudyDescription='CHEST CT',
             SeriesInstanceUID='1.1.2', SeriesNumber=2, Modality='SR', SOPInstanceUID='1.1.2.1'),
        dict(PatientName='Doe^Jane', PatientID='PAT002', PatientSex='F', PatientBirthDate='19900505',
             StudyInstanceUID='2.1', StudyDate='20230915', StudyDescription='BRAIN MR',
             SeriesInstanceUID='2.1.1', SeriesNumber=1, Modality='MR', SOPInstanceUID='2.1.1.1'),
        dict(PatientName='Smith^Doe', PatientID='PAT010', PatientSex='M', PatientBirthDate='19750101',
             StudyInstanceUID='3.1', StudyDate='20220120', StudyDescription='ABDOMEN CT',
             SeriesInstanceUID='3.1.1', SeriesNumber=1, Modality='CT', SOPInstanceUID='3.1.1.1'),
    ]
    for index, values in enumerate(files):
        attributes = FileAttributes.from_dataset(make_dataset(**values))
        sync.sync(attributes, tmp_path / f'{index}.dcm')
