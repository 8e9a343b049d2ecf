"""
Core Package - analysis model and report rendering
"""
from .analysis import AnalysisResult, Language, LocalizedText

__all__ = ["AnalysisResult", "Language", "LocalizedText"]
