"""
Analysis Result Model

Read-only record produced by the upstream diagnosis step, plus the closed
set of report languages.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Mapping, Optional, Union

from poultry_report.utils import (
    InvalidAnalysisError,
    MissingLocalizationError,
    UnsupportedLanguageError,
)


class Language(str, Enum):
    """Supported report languages."""
    AR = "ar"
    EN = "en"

    @classmethod
    def parse(cls, value: Union["Language", str, None], default: Optional["Language"] = None) -> "Language":
        if value is None:
            return default or cls.AR
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedLanguageError(str(value), [lang.value for lang in cls])

    @property
    def direction(self) -> str:
        return "rtl" if self is Language.AR else "ltr"

    @property
    def text_align(self) -> str:
        return "right" if self is Language.AR else "left"

    @property
    def locale(self) -> str:
        return "ar-SA" if self is Language.AR else "en-US"


@dataclass(frozen=True)
class LocalizedText:
    """Display text keyed by language."""
    values: Dict[Language, str] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any, field_name: str) -> "LocalizedText":
        if isinstance(value, LocalizedText):
            return value
        if not isinstance(value, Mapping):
            raise InvalidAnalysisError(
                f"'{field_name}' must be a mapping of language code to text",
                field=field_name
            )
        values = {}
        for code, text in value.items():
            try:
                lang = Language(str(code).lower())
            except ValueError:
                continue  # only ar/en are rendered
            if text is not None:
                values[lang] = str(text)
        return cls(values)

    def get(self, language: Language, field_name: str = "text") -> str:
        """Return non-empty text for ``language`` or raise MissingLocalizationError."""
        text = self.values.get(language, "")
        if not text.strip():
            raise MissingLocalizationError(field_name, language.value)
        return text

    def get_or(self, language: Language, default: str) -> str:
        text = self.values.get(language, "")
        return text if text.strip() else default

    def to_dict(self) -> Dict[str, str]:
        return {lang.value: text for lang, text in self.values.items()}


Number = Union[int, float]


@dataclass(frozen=True)
class BreedInfo:
    name: LocalizedText
    confidence: Number


@dataclass(frozen=True)
class WeightEstimate:
    estimated: Union[str, Number]
    method: LocalizedText
    error_margin: str


@dataclass(frozen=True)
class DiseaseInfo:
    name: LocalizedText
    probability: Number


@dataclass(frozen=True)
class TreatmentPlan:
    medication: LocalizedText
    dosage: LocalizedText
    duration: LocalizedText
    warnings: LocalizedText


@dataclass(frozen=True)
class AnalysisResult:
    """Complete diagnosis result for one bird."""
    overall_confidence: Number
    breed: BreedInfo
    weight: WeightEstimate
    disease: DiseaseInfo
    treatment: TreatmentPlan

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        """
        Build a result from the upstream wire form.

        Accepts camelCase keys (``overallConfidence``, ``errorMargin``) as
        produced by the analysis step, or their snake_case equivalents.
        Missing per-language entries are tolerated here and reported when a
        renderer asks for them.
        """
        if not isinstance(data, Mapping):
            raise InvalidAnalysisError("Analysis result must be a mapping", field="root")

        breed = _section(data, "breed")
        weight = _section(data, "weight")
        disease = _section(data, "disease")
        treatment = _section(data, "treatment")

        estimated = _pick(weight, "estimated", "weight.estimated")
        if not isinstance(estimated, (str, int, float)) or isinstance(estimated, bool):
            raise InvalidAnalysisError("'weight.estimated' must be text or a number", field="weight.estimated")

        return cls(
            overall_confidence=_number(_pick(data, "overallConfidence", "overallConfidence", "overall_confidence"), "overallConfidence"),
            breed=BreedInfo(
                name=LocalizedText.from_value(_pick(breed, "name", "breed.name"), "breed.name"),
                confidence=_number(_pick(breed, "confidence", "breed.confidence"), "breed.confidence"),
            ),
            weight=WeightEstimate(
                estimated=estimated,
                method=LocalizedText.from_value(_pick(weight, "method", "weight.method"), "weight.method"),
                error_margin=str(_pick(weight, "errorMargin", "weight.errorMargin", "error_margin")),
            ),
            disease=DiseaseInfo(
                name=LocalizedText.from_value(_pick(disease, "name", "disease.name"), "disease.name"),
                probability=_number(_pick(disease, "probability", "disease.probability"), "disease.probability"),
            ),
            treatment=TreatmentPlan(
                medication=LocalizedText.from_value(_pick(treatment, "medication", "treatment.medication"), "treatment.medication"),
                dosage=LocalizedText.from_value(_pick(treatment, "dosage", "treatment.dosage"), "treatment.dosage"),
                duration=LocalizedText.from_value(_pick(treatment, "duration", "treatment.duration"), "treatment.duration"),
                warnings=LocalizedText.from_value(_pick(treatment, "warnings", "treatment.warnings"), "treatment.warnings"),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallConfidence": self.overall_confidence,
            "breed": {
                "name": self.breed.name.to_dict(),
                "confidence": self.breed.confidence,
            },
            "weight": {
                "estimated": self.weight.estimated,
                "method": self.weight.method.to_dict(),
                "errorMargin": self.weight.error_margin,
            },
            "disease": {
                "name": self.disease.name.to_dict(),
                "probability": self.disease.probability,
            },
            "treatment": {
                "medication": self.treatment.medication.to_dict(),
                "dosage": self.treatment.dosage.to_dict(),
                "duration": self.treatment.duration.to_dict(),
                "warnings": self.treatment.warnings.to_dict(),
            },
        }


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        raise InvalidAnalysisError(f"Missing '{key}' section", field=key)
    return value


def _pick(data: Mapping[str, Any], key: str, path: str, alias: Optional[str] = None) -> Any:
    if key in data:
        return data[key]
    if alias and alias in data:
        return data[alias]
    raise InvalidAnalysisError(f"Missing field '{path}'", field=path)


def _number(value: Any, path: str) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAnalysisError(f"'{path}' must be numeric", field=path)
    return value
