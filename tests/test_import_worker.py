"""Tests for pacs/controllers/importing/import_worker.py."""
from pathlib import Path

import pytest

from conftest import SERIES_UID_1, SERIES_UID_2
from pacs.controllers.importing import ImportInformation, ImportWorker
from pacs.controllers.storage import HierarchySync, metadata_reader
from pacs.exceptions import WalkAborted
from pacs.models import Instance, Patient, Series, Study

pytestmark = pytest.mark.django_db


@pytest.fixture
def worker():
    return ImportWorker(HierarchySync(), progress_every=2)


@pytest.fixture
def study_folder(tmp_path, dicom_file):
    """One patient, one study, two series of two images, plus a stray text file."""
    dicom_file('study/s1/1.dcm', SOPInstanceUID='1.2.3.1', SeriesInstanceUID=SERIES_UID_1)
    dicom_file('study/s1/2.dcm', SOPInstanceUID='1.2.3.2', SeriesInstanceUID=SERIES_UID_1)
    dicom_file('study/s2/nested/3.dcm', SOPInstanceUID='1.2.3.3', SeriesInstanceUID=SERIES_UID_2)
    dicom_file('study/s2/4', SOPInstanceUID='1.2.3.4', SeriesInstanceUID=SERIES_UID_2)
    (tmp_path / 'study' / 'README.txt').write_text('acquisition notes')
    return tmp_path / 'study'


def _run(worker, root: Path) -> ImportInformation:
    return worker.run(ImportInformation(root))


class TestImportDirectory:
    def test_imports_every_dicom_file(self, worker, study_folder):
        info = _run(worker, study_folder)

        assert sorted(info.messages) == ['1.2.3.1', '1.2.3.2', '1.2.3.3', '1.2.3.4']
        assert info.error_count == 0
        assert info.files_seen == 5
        assert info.finished_at is not None

        assert Patient.objects.count() == 1
        assert Study.objects.count() == 1
        assert Series.objects.count() == 2
        assert Instance.objects.count() == 4

    def test_reimport_counts_duplicates(self, worker, study_folder):
        _run(worker, study_folder)
        info = _run(worker, study_folder)

        assert info.message_count == 0
        assert info.duplicate_count == 4
        assert info.error_count == 0
        assert Instance.objects.count() == 4

    def test_bad_files_are_counted_and_skipped(self, worker, tmp_path, dicom_file):
        dicom_file('mixed/good.dcm', SOPInstanceUID='1.2.3.1')
        dicom_file('mixed/anonymous.dcm', SOPInstanceUID='1.2.3.2', PatientName=None)
        (tmp_path / 'mixed' / 'broken.dcm').write_bytes(b'\0' * 128 + b'DICM' + b'\xff' * 16)

        info = _run(worker, tmp_path / 'mixed')

        assert info.messages == ['1.2.3.1']
        assert info.error_count == 2
        assert Instance.objects.count() == 1

    def test_unreadable_file_is_counted(self, worker, tmp_path, dicom_file, monkeypatch):
        dicom_file('locked/1.dcm', SOPInstanceUID='1.2.3.1')
        locked = dicom_file('locked/2.dcm', SOPInstanceUID='1.2.3.2')
        real_open = open

        def guarded_open(path, *args, **kwargs):
            if Path(path) == locked:
                raise PermissionError(13, 'Permission denied', str(path))
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr(metadata_reader, 'open', guarded_open, raising=False)
        info = _run(worker, tmp_path / 'locked')

        assert info.messages == ['1.2.3.1']
        assert info.error_count == 1
        assert info.files_seen == 2

    def test_empty_directory(self, worker, tmp_path):
        info = _run(worker, tmp_path)
        assert info.has_messages is False
        assert info.files_seen == 0
        assert info.finished_at is not None

    def test_walk_failure_keeps_partial_result(self, worker, study_folder, monkeypatch):
        first = study_folder / 's1' / '1.dcm'

        def failing_walk(root):
            yield first
            raise WalkAborted(f'{root}: permission denied')

        monkeypatch.setattr(worker, 'walk', failing_walk)
        info = _run(worker, study_folder)

        assert info.messages == ['1.2.3.1']
        assert info.finished_at is not None


class TestImportSingleFile:
    def test_file_root_is_imported(self, worker, dicom_file):
        info = _run(worker, dicom_file('single.dcm', SOPInstanceUID='1.2.3.9'))
        assert info.messages == ['1.2.3.9']
        assert info.files_seen == 1

    def test_non_dicom_file_root_is_an_error(self, worker, tmp_path):
        path = tmp_path / 'notes.txt'
        path.write_text('hello')
        info = _run(worker, path)
        assert info.message_count == 0
        assert info.error_count == 1


class TestWalk:
    def test_yields_each_file_once_in_order(self, worker, study_folder):
        paths = [p.relative_to(study_folder).as_posix() for p in worker.walk(study_folder)]
        assert paths == ['README.txt', 's1/1.dcm', 's1/2.dcm', 's2/4', 's2/nested/3.dcm']


class TestImportInformation:
    def test_blank_message_rejected(self, tmp_path):
        info = ImportInformation(tmp_path)
        with pytest.raises(ValueError):
            info.add_info('  ')

    def test_to_dict(self, tmp_path):
        info = ImportInformation(tmp_path)
        info.add_info('1.2.3')
        info.add_error()
        info.add_duplicate()
        info.mark_finished()

        data = info.to_dict()
        assert data['root_path'] == str(tmp_path)
        assert data['imported'] == 1
        assert data['errors'] == 1
        assert data['duplicates'] == 1
        assert data['finished_at'] is not None
