from django.db import models
from django.utils import timezone

from .base import DicomAttributesMixin
from .study import Study


class Series(DicomAttributesMixin, models.Model):
    """
    A series of instances acquired within one study.
    """
    DICOM_ATTRIBUTES = {
        'SeriesInstanceUID': 'series_instance_uid',
        'SeriesNumber': 'series_number',
        'Modality': 'modality',
        'SeriesDescription': 'series_description',
        'SeriesDate': 'series_date',
        'SeriesTime': 'series_time',
        'PerformingPhysicianName': 'performing_physician_name',
        'ProtocolName': 'protocol_name',
        'OperatorsName': 'operators_name',
        'BodyPartExamined': 'body_part_examined',
        'PatientPosition': 'patient_position',
        'Laterality': 'laterality',
    }

    series_instance_uid = models.CharField(max_length=64, unique=True)

    study = models.ForeignKey(Study, on_delete=models.PROTECT, related_name='series')

    series_number = models.IntegerField(null=True, blank=True)
    modality = models.CharField(max_length=16, null=True, blank=True)
    series_description = models.CharField(max_length=1000, null=True, blank=True)
    series_date = models.CharField(max_length=8, null=True, blank=True)
    series_time = models.CharField(max_length=16, null=True, blank=True)

    performing_physician_name = models.CharField(max_length=255, null=True, blank=True)
    protocol_name = models.CharField(max_length=255, null=True, blank=True)
    operators_name = models.CharField(max_length=255, null=True, blank=True)

    body_part_examined = models.CharField(max_length=64, null=True, blank=True)
    patient_position = models.CharField(max_length=16, null=True, blank=True)
    laterality = models.CharField(max_length=16, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'series'
        ordering = ['series_number']
        verbose_name_plural = 'series'
        indexes = [
            models.Index(fields=['study'], name='series_study_idx'),
        ]

    def __str__(self):
        return f"Series {self.series_number} - {self.modality}"
