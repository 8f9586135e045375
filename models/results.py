"""Result types produced by the health analytics evaluators.

Every result carries the breakdown that produced it, so any explanation
shown to the user can be traced back to the rules that fired.
`to_dict()` returns the camelCase JSON shape served to the client.
"""
from typing import Any, Dict, List
from dataclasses import dataclass, field


@dataclass
class HealthCreditScoreResult:
    score: int                                   # 300-1000
    trend: str                                   # "UP" | "DOWN"
    explanation: str
    weight_breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "trend": self.trend,
            "explanation": self.explanation,
            "weightBreakdown": dict(self.weight_breakdown),
        }


@dataclass
class DiseaseRiskResult:
    cardiovascular_percentage: int               # 0-99
    type2_diabetes_percentage: int               # 0-99
    status: str                                  # "WARNING" | "CLEAR"
    cvd_breakdown: Dict[str, float] = field(default_factory=dict)
    t2d_breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cardiovascularPercentage": self.cardiovascular_percentage,
            "cvdBreakdown": dict(self.cvd_breakdown),
            "type2DiabetesPercentage": self.type2_diabetes_percentage,
            "t2dBreakdown": dict(self.t2d_breakdown),
            "status": self.status,
        }


@dataclass
class MentalHealthResult:
    mental_score: int                            # 0-100
    risk_band: str                               # "Low" | "Moderate" | "High"
    breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mentalScore": self.mental_score,
            "riskBand": self.risk_band,
            "breakdown": dict(self.breakdown),
        }


@dataclass
class LifestyleResult:
    score: int                                   # 10-100
    tier: str                                    # "Optimal" | "Balanced" | "High Risk"
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier,
            "recommendations": list(self.recommendations),
        }


@dataclass
class GeneticRiskResult:
    condition: str                               # diabetes | heartDisease | cancer | hypertension
    risk_percentage: int                         # 0-100
    tier: str                                    # "Low" | "Moderate" | "High"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "condition": self.condition,
            "riskPercentage": self.risk_percentage,
            "tier": self.tier,
        }


@dataclass
class LabInterpretation:
    test_name: str
    value: Any
    unit: str
    reference_range: str                         # "70 - 99 mg/dL" or "N/A"
    interpretation: str
    is_anomalous: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "testName": self.test_name,
            "value": self.value,
            "unit": self.unit,
            "referenceRange": self.reference_range,
            "interpretation": self.interpretation,
            "isAnomalous": self.is_anomalous,
        }
