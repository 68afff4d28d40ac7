from django.db import models
from django.utils import timezone

from .base import DicomAttributesMixin
from .patient import Patient


class Study(DicomAttributesMixin, models.Model):
    """
    A single examination of a patient, keyed by Study Instance UID.
    """
    DICOM_ATTRIBUTES = {
        'StudyInstanceUID': 'study_instance_uid',
        'StudyID': 'study_id',
        'StudyDescription': 'study_description',
        'StudyDate': 'study_date',
        'StudyTime': 'study_time',
        'AccessionNumber': 'accession_number',
        'ModalitiesInStudy': 'modalities_in_study',
        'ReferringPhysicianName': 'referring_physician_name',
    }

    study_instance_uid = models.CharField(max_length=64, unique=True)

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='studies')

    study_id = models.CharField(max_length=16, null=True, blank=True)
    study_description = models.CharField(max_length=1000, null=True, blank=True)
    study_date = models.CharField(max_length=8, null=True, blank=True, db_index=True)
    study_time = models.CharField(max_length=16, null=True, blank=True)
    accession_number = models.CharField(max_length=16, null=True, blank=True)
    modalities_in_study = models.CharField(max_length=255, null=True, blank=True)
    referring_physician_name = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'studies'
        ordering = ['study_instance_uid']
        verbose_name_plural = 'studies'
        indexes = [
            models.Index(fields=['patient'], name='studies_patient_idx'),
        ]

    def __str__(self):
        return f"Study {self.study_instance_uid}"
