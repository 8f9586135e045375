from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class SmokingStatus(Enum):
    NEVER = "never"
    FORMER = "former"
    CURRENT = "current"

    @classmethod
    def parse(cls, text: Any) -> Optional["SmokingStatus"]:
        """Map free-text answers ("yes, daily", "quit 2019", "never") onto the enum.

        Any answer containing "yes" counts as current smoking.
        """
        if text is None:
            return None
        if isinstance(text, cls):
            return text
        value = str(text).strip().lower()
        if not value:
            return None
        if "yes" in value or value == cls.CURRENT.value:
            return cls.CURRENT
        if any(word in value for word in ("former", "quit", "stopped", "ex-")):
            return cls.FORMER
        return cls.NEVER


class AlcoholStatus(Enum):
    NEVER = "never"
    OCCASIONAL = "occasional"
    REGULAR = "regular"
    HEAVY = "heavy"

    @classmethod
    def parse(cls, text: Any) -> Optional["AlcoholStatus"]:
        """Only exact "regular" / "heavy" (any case) count as frequent drinking."""
        if text is None:
            return None
        if isinstance(text, cls):
            return text
        value = str(text).strip().lower()
        if not value:
            return None
        if value == "regular":
            return cls.REGULAR
        if value == "heavy":
            return cls.HEAVY
        if value in ("never", "none", "no"):
            return cls.NEVER
        return cls.OCCASIONAL


def _as_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    try:
        return [item for item in value if isinstance(item, str)]
    except TypeError:
        return []


@dataclass
class UserProfileParams:
    """Health attributes of one user, as submitted.

    Numeric fields are kept as received; evaluators parse them defensively,
    so a malformed value ("abc") never raises.
    """
    age: Optional[int] = None                    # 1-120
    gender: Optional[str] = None                 # "Male" | "Female" | "Other"
    bmi: Optional[float] = None
    blood_pressure: Optional[str] = None         # "SYS/DIA", e.g. "120/80"
    blood_sugar: Optional[float] = None          # mg/dL fasting
    activity_level: Optional[str] = None         # sedentary | light | moderate | active
    sleep_hours: Optional[float] = None
    smoking_status: Optional[SmokingStatus] = None
    alcohol_status: Optional[AlcoholStatus] = None
    family_history: List[str] = field(default_factory=list)

    def __post_init__(self):
        # Free text is parsed once here; evaluators only see the enums
        self.smoking_status = SmokingStatus.parse(self.smoking_status)
        self.alcohol_status = AlcoholStatus.parse(self.alcohol_status)
        self.family_history = _as_string_list(self.family_history)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "UserProfileParams":
        """Build from the camelCase JSON body the HTTP layer receives."""
        data = data or {}
        return cls(
            age=data.get("age"),
            gender=data.get("gender"),
            bmi=data.get("bmi"),
            blood_pressure=data.get("bloodPressure"),
            blood_sugar=data.get("bloodSugar"),
            activity_level=data.get("activityLevel"),
            sleep_hours=data.get("sleepHours"),
            smoking_status=data.get("smokingStatus"),
            alcohol_status=data.get("alcoholStatus"),
            family_history=data.get("familyHistory"),
        )

    @classmethod
    def coerce(cls, profile: Any) -> "UserProfileParams":
        if isinstance(profile, cls):
            return profile
        return cls.from_dict(profile if isinstance(profile, dict) else None)

    @property
    def is_male(self) -> bool:
        return isinstance(self.gender, str) and self.gender.strip().lower() == "male"

    @property
    def is_sedentary(self) -> bool:
        return isinstance(self.activity_level, str) and self.activity_level.strip().lower() == "sedentary"


@dataclass
class LifestyleAnswers:
    """Answers to the lifestyle questionnaire."""
    meals_per_day: Optional[int] = None
    water_intake: Optional[int] = None           # glasses per day
    exercise_minutes: Optional[int] = None       # per day
    sugar_intake: Optional[str] = None           # "low" | "moderate" | "high"
    veg_intake: Optional[str] = None             # "low" | "moderate" | "high"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LifestyleAnswers":
        data = data or {}
        return cls(
            meals_per_day=data.get("mealsPerDay"),
            water_intake=data.get("waterIntake"),
            exercise_minutes=data.get("exerciseMinutes"),
            sugar_intake=data.get("sugarIntake"),
            veg_intake=data.get("vegIntake"),
        )

    @classmethod
    def coerce(cls, answers: Any) -> "LifestyleAnswers":
        if isinstance(answers, cls):
            return answers
        return cls.from_dict(answers if isinstance(answers, dict) else None)


@dataclass
class FamilyMember:
    relation: str = ""                           # "Parent" | "Grandparent" | "Sibling" | ...
    conditions: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.relation = self.relation if isinstance(self.relation, str) else ""
        self.conditions = _as_string_list(self.conditions)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FamilyMember":
        data = data or {}
        return cls(relation=data.get("relation", ""), conditions=data.get("conditions"))

    @classmethod
    def coerce(cls, member: Any) -> "FamilyMember":
        if isinstance(member, cls):
            return member
        return cls.from_dict(member if isinstance(member, dict) else None)


@dataclass
class LabResult:
    test_name: str
    value: float
    unit: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LabResult":
        data = data or {}
        return cls(
            test_name=data.get("testName") or "",
            value=data.get("value"),
            unit=data.get("unit") or "",
        )

    @classmethod
    def coerce(cls, result: Any) -> "LabResult":
        if isinstance(result, cls):
            return result
        return cls.from_dict(result if isinstance(result, dict) else None)
