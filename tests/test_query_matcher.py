"""Tests for pacs/controllers/dicom/query_handlers/query_matcher.py."""
import pytest
from django.db import DatabaseError
from pydicom import Dataset

from pacs.controllers.dicom.query_handlers import QueryMatcher, dicom_wildcard_to_regex
from pacs.exceptions import ResolutionFailure, UnsupportedQueryLevel


def _names(patients):
    return sorted(p.patient_name for p in patients)


@pytest.fixture
def archive(populated_archive):
    return QueryMatcher()


class TestWildcardTranslation:
    @pytest.mark.parametrize('pattern, expected', [
        ('Doe*', '^Doe.*$'),
        ('PAT00?', '^PAT00.$'),
        ('a.b*', r'^a\.b.*$'),
        ('x+y?', r'^x\+y.$'),
    ])
    def test_translation(self, pattern, expected):
        assert dicom_wildcard_to_regex(pattern) == expected


class TestPatientLevel:
    def test_prefix_wildcard(self, archive):
        assert _names(archive.find_patients({'PatientName': 'Doe*'})) == ['Doe^Jane', 'Doe^John']

    def test_single_character_wildcard(self, archive):
        patients = archive.find_patients({'PatientID': 'PAT00?'})
        assert sorted(p.patient_id for p in patients) == ['PAT001', 'PAT002']

    def test_exact_natural_key(self, archive):
        assert _names(archive.find_patients({'PatientName': 'Smith^Doe'})) == ['Smith^Doe']

    def test_matching_is_case_sensitive(self, archive):
        assert archive.find_patients({'PatientName': 'doe*'}) == []
        assert archive.find_patients({'PatientName': 'doe^john'}) == []

    def test_regex_metacharacters_are_literal(self, archive):
        assert archive.find_patients({'PatientName': 'Doe^J.h*'}) == []

    def test_remaining_key_filtered_in_memory(self, archive):
        assert _names(archive.find_patients({'PatientSex': 'M'})) == ['Doe^John', 'Smith^Doe']

    def test_entity_without_attribute_never_matches(self, archive):
        assert _names(archive.find_patients({'PatientBirthDate': '19750101'})) == ['Smith^Doe']
        assert _names(archive.find_patients({'EthnicGroup': 'X'})) == []

    @pytest.mark.parametrize('keys', [{}, None, {'PatientName': ''}, {'PatientName': '*'}])
    def test_universal_matching(self, archive, keys):
        assert len(archive.find_patients(keys)) == 3

    def test_unknown_keys_are_ignored(self, archive):
        assert len(archive.find_patients({'InstitutionName': 'General Hospital'})) == 3

    def test_birth_date_range(self, archive):
        assert _names(archive.find_patients({'PatientBirthDate': '19800102-19951231'})) == ['Doe^Jane']
        assert _names(archive.find_patients({'PatientBirthDate': '-19791231'})) == ['Smith^Doe']

    def test_dataset_identifier(self, archive):
        ds = Dataset()
        ds.QueryRetrieveLevel = 'PATIENT'
        ds.PatientName = 'Doe*'
        ds.PatientID = ''
        ds.PatientSex = 'F'
        assert _names(archive.find_patients(ds)) == ['Doe^Jane']


class TestStudyLevel:
    def test_uid_list(self, archive):
        studies = archive.find_studies({'StudyInstanceUID': '1.1\\3.1'})
        assert sorted(s.study_instance_uid for s in studies) == ['1.1', '3.1']

    def test_date_range(self, archive):
        studies = archive.find_studies({'StudyDate': '20230101-20231231'})
        assert sorted(s.study_instance_uid for s in studies) == ['1.1', '2.1']

    def test_open_ended_range(self, archive):
        studies = archive.find_studies({'StudyDate': '20230701-'})
        assert [s.study_instance_uid for s in studies] == ['2.1']

    def test_parent_patient_keys(self, archive):
        studies = archive.find_studies({'PatientName': 'Doe*', 'PatientSex': 'M'})
        assert [s.study_instance_uid for s in studies] == ['1.1']

    def test_in_memory_wildcard(self, archive):
        studies = archive.find_studies({'StudyDescription': '*CT'})
        assert sorted(s.study_instance_uid for s in studies) == ['1.1', '3.1']

    def test_response_attributes_include_patient(self, archive):
        [study] = archive.find_studies({'StudyInstanceUID': '2.1'})
        attributes = archive.response_attributes('STUDY', study)
        assert attributes['PatientName'] == 'Doe^Jane'
        assert attributes['PatientSex'] == 'F'
        assert attributes['PatientBirthDate'] == '19900505'
        assert attributes['StudyDescription'] == 'BRAIN MR'


class TestSeriesAndImageLevels:
    def test_series_of_study(self, archive):
        series = archive.find_series({'StudyInstanceUID': '1.1'})
        assert sorted(s.series_instance_uid for s in series) == ['1.1.1', '1.1.2']

    def test_series_modality(self, archive):
        series = archive.find_series({'Modality': 'CT'})
        assert sorted(s.series_instance_uid for s in series) == ['1.1.1', '3.1.1']

    def test_series_number_compares_as_text(self, archive):
        series = archive.find_series({'StudyInstanceUID': '1.1', 'SeriesNumber': '2'})
        assert [s.series_instance_uid for s in series] == ['1.1.2']

    def test_instances_of_series(self, archive):
        instances = archive.find_instances({'SeriesInstanceUID': '1.1.1'})
        assert sorted(i.sop_instance_uid for i in instances) == ['1.1.1.1', '1.1.1.2']

    def test_instance_response_carries_parent_uids(self, archive):
        [instance] = archive.find_instances({'SOPInstanceUID': '2.1.1.1'})
        attributes = archive.response_attributes('IMAGE', instance)
        assert attributes['SeriesInstanceUID'] == '2.1.1'
        assert attributes['StudyInstanceUID'] == '2.1'


class TestFailures:
    def test_unsupported_level(self, archive):
        with pytest.raises(UnsupportedQueryLevel):
            archive.find('FRAME', {})

    def test_database_error_is_wrapped(self, archive, monkeypatch):
        def broken(spec, keys):
            raise DatabaseError('database is locked')

        monkeypatch.setattr(archive, '_build_queryset', broken)
        with pytest.raises(ResolutionFailure):
            archive.find_patients({'PatientName': 'Doe*'})
