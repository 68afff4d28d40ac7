from django.db import models
from django.utils import timezone

from .base import DicomAttributesMixin
from .series import Series


class Instance(DicomAttributesMixin, models.Model):
    """
    One archived SOP instance.
    The storage path is the absolute path of the source file and is written once, at creation.
    """
    DICOM_ATTRIBUTES = {
        'SOPInstanceUID': 'sop_instance_uid',
        'SOPClassUID': 'sop_class_uid',
        'InstanceNumber': 'instance_number',
        'ContentDate': 'content_date',
        'ContentTime': 'content_time',
        'ImageType': 'image_type',
        'AcquisitionNumber': 'acquisition_number',
        'Rows': 'rows',
        'Columns': 'columns',
        'BitsAllocated': 'bits_allocated',
        'BitsStored': 'bits_stored',
    }

    sop_instance_uid = models.CharField(max_length=64, unique=True)

    series = models.ForeignKey(Series, on_delete=models.PROTECT, related_name='instances')

    path = models.CharField(max_length=1024)

    sop_class_uid = models.CharField(max_length=64, null=True, blank=True)
    instance_number = models.IntegerField(null=True, blank=True)
    content_date = models.CharField(max_length=8, null=True, blank=True)
    content_time = models.CharField(max_length=16, null=True, blank=True)
    image_type = models.CharField(max_length=255, null=True, blank=True)
    acquisition_number = models.IntegerField(null=True, blank=True)

    rows = models.IntegerField(null=True, blank=True)
    columns = models.IntegerField(null=True, blank=True)
    bits_allocated = models.IntegerField(null=True, blank=True)
    bits_stored = models.IntegerField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'instances'
        ordering = ['instance_number']
        indexes = [
            models.Index(fields=['series'], name='instances_series_idx'),
        ]

    def __str__(self):
        return f"Instance {self.sop_instance_uid}"
