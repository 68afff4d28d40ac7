from django.db import models
from django.utils import timezone

from .base import DicomAttributesMixin


class Patient(DicomAttributesMixin, models.Model):
    """
    Top level of the archive hierarchy.
    The patient name is the natural key; studies hang off the reverse relation.
    """
    DICOM_ATTRIBUTES = {
        'PatientName': 'patient_name',
        'PatientID': 'patient_id',
        'PatientBirthDate': 'patient_birth_date',
        'PatientBirthTime': 'patient_birth_time',
        'PatientSex': 'patient_sex',
        'OtherPatientIDs': 'other_patient_ids',
        'OtherPatientNames': 'other_patient_names',
        'EthnicGroup': 'ethnic_group',
        'PatientComments': 'patient_comments',
        'PatientAge': 'patient_age',
        'PatientSize': 'patient_size',
        'PatientWeight': 'patient_weight',
    }

    patient_name = models.CharField(max_length=255, unique=True)
    patient_id = models.CharField(max_length=64, blank=True, db_index=True)

    patient_birth_date = models.CharField(max_length=8, null=True, blank=True)
    patient_birth_time = models.CharField(max_length=16, null=True, blank=True)
    patient_sex = models.CharField(max_length=16, null=True, blank=True)

    other_patient_ids = models.CharField(max_length=1000, null=True, blank=True)
    other_patient_names = models.CharField(max_length=1000, null=True, blank=True)
    ethnic_group = models.CharField(max_length=64, null=True, blank=True)
    patient_comments = models.TextField(null=True, blank=True)

    patient_age = models.CharField(max_length=4, null=True, blank=True)
    patient_size = models.FloatField(null=True, blank=True)
    patient_weight = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'patients'
        ordering = ['patient_name']

    def __str__(self):
        return f"Patient {self.patient_name} ({self.patient_id or 'no ID'})"
