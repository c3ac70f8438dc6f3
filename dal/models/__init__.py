#!/usr/bin/env python3
"""
Models package for DoseCare
"""

from .base import Base
from .pharmacy import Pharmacy
from .client import Client
from .medications import Medications
from .dose_records import DoseRecords
from .adverse_events import AdverseEvents
from .dose_corrections import DoseCorrections
from .vital_signs import VitalSigns
from .pharmacy_ads import PharmacyAds

__all__ = [
    'Base',
    'Pharmacy',
    'Client',
    'Medications',
    'DoseRecords',
    'AdverseEvents',
    'DoseCorrections',
    'VitalSigns',
    'PharmacyAds'
]
