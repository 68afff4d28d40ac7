from typing import Any, Dict


class DicomAttributesMixin:
    """
    Maps model fields onto DICOM keywords.

    Subclasses declare DICOM_ATTRIBUTES as {keyword: field_name}.
    """
    DICOM_ATTRIBUTES: Dict[str, str] = {}

    def as_attributes(self) -> Dict[str, Any]:
        """Return the non-null, non-blank fields keyed by DICOM keyword."""
        attributes = {}
        for keyword, field_name in self.DICOM_ATTRIBUTES.items():
            value = getattr(self, field_name, None)
            if value is None or value == '':
                continue
            attributes[keyword] = value
        return attributes
