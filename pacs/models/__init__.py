# Models package
from .patient import Patient
from .study import Study
from .series import Series
from .instance import Instance

__all__ = [
    'Patient',
    'Study',
    'Series',
    'Instance',
]
