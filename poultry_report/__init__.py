"""
Poultry Diagnosis Report Service

Bilingual (Arabic/English) rendering of chicken-health diagnosis results.
"""
__version__ = "1.0.0"
