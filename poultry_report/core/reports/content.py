"""
Report Content

Localized static labels and the language-neutral section model shared by
the HTML and PDF renderers. Every table is keyed by each ``Language``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

from poultry_report.core.analysis import AnalysisResult, Language

LABELS: Dict[Language, Dict[str, str]] = {
    Language.AR: {
        "title": "تقرير التشخيص الشامل",
        "subtitle": "نظام تشخيص صحة الدجاج بالذكاء الاصطناعي",
        "confidence_heading": "مؤشر الثقة العام",
        "disclaimer_heading": "ملاحظة هامة:",
        "disclaimer": (
            "هذه النتائج استرشادية وتحتاج لتأكيد من طبيب بيطري متخصص. "
            "لا تستبدل التشخيص الطبي المهني."
        ),
        "breed": "نوع الدجاجة",
        "weight": "الوزن التقديري",
        "disease": "المرض المشتبه به",
        "treatment": "طريقة العلاج",
        "breed_confidence": "نسبة الثقة:",
        "error_margin": "هامش الخطأ:",
        "probability": "نسبة الاحتمال:",
        "medication": "الدواء:",
        "dosage": "الجرعة:",
        "duration": "المدة:",
        "warnings": "تحذيرات:",
    },
    Language.EN: {
        "title": "Comprehensive Diagnosis Report",
        "subtitle": "AI-Powered Chicken Health Diagnosis System",
        "confidence_heading": "Overall Confidence Indicator",
        "disclaimer_heading": "Important Note:",
        "disclaimer": (
            "These results are indicative and require confirmation from a specialized "
            "veterinarian. They do not replace professional medical diagnosis."
        ),
        "breed": "Chicken Breed",
        "weight": "Estimated Weight",
        "disease": "Suspected Disease",
        "treatment": "Treatment",
        "breed_confidence": "Confidence:",
        "error_margin": "Error Margin:",
        "probability": "Probability:",
        "medication": "Medication:",
        "dosage": "Dosage:",
        "duration": "Duration:",
        "warnings": "Warnings:",
    },
}

# Fixed layout order, independent of the data
SECTION_ORDER = ("breed", "weight", "disease", "treatment")

FILENAME_PREFIX: Dict[Language, str] = {
    Language.AR: "تقرير-التشخيص",
    Language.EN: "diagnosis-report",
}

UNKNOWN_TOKEN = "unknown"

_ARABIC_INDIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


@dataclass(frozen=True)
class ReportLine:
    """One line of a section: optional label, value, and emphasis."""
    value: str
    label: Optional[str] = None
    emphasis: bool = False
    label_emphasis: bool = False


@dataclass(frozen=True)
class ReportSection:
    key: str
    title: str
    lines: List[ReportLine] = field(default_factory=list)


def label(language: Language, key: str) -> str:
    return LABELS[language][key]


def format_percent(value: Union[int, float]) -> str:
    """87 -> '87%', 87.0 -> '87%', 87.5 -> '87.5%'."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}%"


def format_display_date(moment: datetime, language: Language) -> str:
    """Short calendar date in the language's locale convention."""
    if language is Language.AR:
        return f"{moment.day}/{moment.month}/{moment.year}".translate(_ARABIC_INDIC_DIGITS)
    return f"{moment.month}/{moment.day}/{moment.year}"


def build_sections(result: AnalysisResult, language: Language) -> List[ReportSection]:
    """
    Build the four report sections in fixed order.

    Raises MissingLocalizationError when a per-language field has no text
    for ``language``.
    """
    t = LABELS[language]
    lang = language

    builders = {
        "breed": lambda: [
            ReportLine(result.breed.name.get(lang, "breed.name"), emphasis=True),
            ReportLine(format_percent(result.breed.confidence), label=t["breed_confidence"]),
        ],
        "weight": lambda: [
            ReportLine(str(result.weight.estimated), emphasis=True),
            ReportLine(result.weight.method.get(lang, "weight.method")),
            ReportLine(result.weight.error_margin, label=t["error_margin"]),
        ],
        "disease": lambda: [
            ReportLine(result.disease.name.get(lang, "disease.name"), emphasis=True),
            ReportLine(format_percent(result.disease.probability), label=t["probability"]),
        ],
        "treatment": lambda: [
            ReportLine(result.treatment.medication.get(lang, "treatment.medication"),
                       label=t["medication"], label_emphasis=True),
            ReportLine(result.treatment.dosage.get(lang, "treatment.dosage"),
                       label=t["dosage"], label_emphasis=True),
            ReportLine(result.treatment.duration.get(lang, "treatment.duration"),
                       label=t["duration"], label_emphasis=True),
            ReportLine(result.treatment.warnings.get(lang, "treatment.warnings"),
                       label=t["warnings"], label_emphasis=True),
        ],
    }

    return [
        ReportSection(key=key, title=t[key], lines=builders[key]())
        for key in SECTION_ORDER
    ]
