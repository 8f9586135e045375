"""Clinical Lab Value Interpretation.

Reference ranges loosely follow consensus guidelines (ADA, AHA). They turn
lab numbers into fixed clinical labels before any AI wording is applied.
"""
from typing import Any, Callable, Dict, Iterable, List, Optional
from dataclasses import dataclass

from models.profile import LabResult
from models.results import LabInterpretation
from tools.bounds import safe_float

UNKNOWN_TEST = "Unknown Test"
INVALID_VALUE = "Invalid Value"
NO_RANGE = "N/A"

# An interpretation containing any of these words is flagged as anomalous
ANOMALY_MARKERS = ("High", "Low", "Elevated")


@dataclass(frozen=True)
class ReferenceRange:
    min: float
    max: float
    unit: str
    interpret: Callable[[float], str]

    def format(self) -> str:
        """e.g. "70 - 99 mg/dL", "4 - 5.6 %"."""
        return f"{self.min:g} - {self.max:g} {self.unit}"


def _fasting_blood_sugar(val: float) -> str:
    if val < 70:
        return "Hypoglycemia (Low)"
    if val > 125:
        return "Diabetes Range (High)"
    if val >= 100:
        return "Prediabetes Range (Elevated)"
    return "Normal"


def _hba1c(val: float) -> str:
    if val < 4.0:
        return "Low"
    if val >= 6.5:
        return "Diabetes Range (High)"
    if val >= 5.7:
        return "Prediabetes Range (Elevated)"
    return "Normal"


def _ldl_cholesterol(val: float) -> str:
    if val < 100:
        return "Optimal"
    if val < 130:
        return "Near Optimal"
    if val < 160:
        return "Borderline High"
    return "High"


def _hdl_cholesterol(val: float) -> str:
    if val < 40:
        return "Low (High Risk)"
    if val >= 60:
        return "Optimal (Protective)"
    return "Normal"


def _hemoglobin(val: float) -> str:
    if val < 12.0:
        return "Low (Possible Anemia)"
    if val > 17.5:
        return "High"
    return "Normal"


def _heart_rate(val: float) -> str:
    if val < 60:
        return "Bradycardia (Low)"
    if val > 100:
        return "Tachycardia (High)"
    return "Normal"


REFERENCE_RANGES: Dict[str, ReferenceRange] = {
    "fasting blood sugar": ReferenceRange(70, 99, "mg/dL", _fasting_blood_sugar),
    "hba1c": ReferenceRange(4.0, 5.6, "%", _hba1c),
    "ldl cholesterol": ReferenceRange(0, 99, "mg/dL", _ldl_cholesterol),
    "hdl cholesterol": ReferenceRange(40, 100, "mg/dL", _hdl_cholesterol),
    "hemoglobin": ReferenceRange(12.0, 17.5, "g/dL", _hemoglobin),
    "heart rate": ReferenceRange(60, 100, "bpm", _heart_rate),
}


def find_reference_range(test_name: Any) -> Optional[ReferenceRange]:
    """
    Exact match on the lowercased, trimmed test name first; failing that,
    the first range whose unit appears in the name ("resting pulse bpm").

    Units are compared as written against the lowercased name, so only
    lowercase units ("%", "bpm") can match. A name mentioning "mg/dl"
    never borrows the glucose range.
    """
    key = str(test_name or "").strip().lower()
    if not key:
        return None
    if key in REFERENCE_RANGES:
        return REFERENCE_RANGES[key]
    for ref in REFERENCE_RANGES.values():
        if ref.unit in key:
            return ref
    return None


def is_anomalous(interpretation: str) -> bool:
    """Textual check: the label mentions High, Low or Elevated."""
    return any(marker in interpretation for marker in ANOMALY_MARKERS)


def evaluate_lab_values(results: Optional[Iterable[Any]]) -> List[LabInterpretation]:
    """Interpret each lab result against the reference table, in input order."""
    interpretations = []
    for raw in results or []:
        result = LabResult.coerce(raw)
        ref = find_reference_range(result.test_name)

        if ref is None:
            interpretations.append(LabInterpretation(
                test_name=result.test_name,
                value=result.value,
                unit=result.unit,
                reference_range=NO_RANGE,
                interpretation=UNKNOWN_TEST,
                is_anomalous=False,
            ))
            continue

        value = safe_float(result.value)
        interpretation = ref.interpret(value) if value is not None else INVALID_VALUE
        interpretations.append(LabInterpretation(
            test_name=result.test_name,
            value=result.value,
            unit=result.unit,
            reference_range=ref.format(),
            interpretation=interpretation,
            is_anomalous=is_anomalous(interpretation),
        ))
    return interpretations
