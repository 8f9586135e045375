"""Deterministic health analytics.

Every function here is pure: same input, same output, no I/O and no shared
state. Each result carries a breakdown of the weights that produced it so
that AI-written explanations can be anchored to these numbers.
"""
from typing import Any, Dict, Iterable, List, Optional

from models.profile import (
    AlcoholStatus,
    FamilyMember,
    LifestyleAnswers,
    SmokingStatus,
    UserProfileParams,
)
from models.results import (
    DiseaseRiskResult,
    GeneticRiskResult,
    HealthCreditScoreResult,
    LifestyleResult,
    MentalHealthResult,
)
from tools.bounds import clamp, parse_blood_pressure, round_half_up, safe_float, safe_int


# ============================================================================
# HEALTH CREDIT SCORE (300-1000)
# ============================================================================

CREDIT_BASELINE = 800
CREDIT_MIN = 300
CREDIT_MAX = 1000

DEFAULT_CREDIT_EXPLANATION = "Your score is {score}. Keep maintaining a balanced diet and regular exercise."
CREDIT_EXPLANATIONS = {
    "excellent": "Excellent preventive behavior. You are in the top 10% of users.",
    "good": "Good health habits tracked. A few lifestyle tweaks can boost your score further.",
    "warning": "Warning: Multiple risk factors detected. Consider scheduling a preventive checkup.",
}


def _bmi_weight(bmi: Optional[float]) -> Optional[tuple]:
    """WHO BMI bands. Values between bands (24.9-25, 29.9-30) score nothing."""
    if bmi is None or bmi <= 0:
        return None
    if bmi < 18.5:
        return "Underweight BMI", -20
    if bmi <= 24.9:
        return "Optimal BMI", 40
    if 25 <= bmi <= 29.9:
        return "Overweight BMI", -30
    if bmi >= 30:
        return "Obese BMI", -60
    return None


def _activity_weight(activity_level: Optional[str]) -> Optional[tuple]:
    if not isinstance(activity_level, str):
        return None
    level = activity_level.strip().lower()
    if level == "sedentary":
        return "Sedentary Lifestyle", -40
    if level == "active":
        return "Active Lifestyle", 50
    return None


def _sleep_weight(sleep_hours: Optional[float]) -> Optional[tuple]:
    """Optimal 7-9h inclusive; under 6h penalised; 6-7h and over 9h neutral.

    Zero hours is an unanswered question, as in the mental check-in.
    """
    if not sleep_hours:
        return None
    if sleep_hours < 6:
        return "Poor Sleep Duration", -30
    if 7 <= sleep_hours <= 9:
        return "Optimal Sleep", 30
    return None


def _blood_pressure_weight(systolic: Optional[float], diastolic: Optional[float]) -> Optional[tuple]:
    """
    AHA blood pressure bands, checked in priority order:
    Stage 2 (>=140 or >=90), Stage 1 (>=130 or >=80), Ideal (91-119 / <80).
    """
    if systolic is None and diastolic is None:
        return None
    sys_ = systolic if systolic is not None else 0
    dia = diastolic if diastolic is not None else 0

    if sys_ >= 140 or dia >= 90:
        return "Hypertension Stage 2", -80
    if sys_ >= 130 or dia >= 80:
        return "Hypertension Stage 1", -40
    # Ideal needs both readings
    if systolic is not None and diastolic is not None and 90 < systolic < 120 and diastolic < 80:
        return "Ideal Blood Pressure", 50
    return None


def _credit_explanation(score: int) -> str:
    if score >= 850:
        return CREDIT_EXPLANATIONS["excellent"]
    if score >= 700:
        return CREDIT_EXPLANATIONS["good"]
    if score < 600:
        return CREDIT_EXPLANATIONS["warning"]
    return DEFAULT_CREDIT_EXPLANATION.format(score=score)


def evaluate_credit_score(profile: Any) -> HealthCreditScoreResult:
    """
    Health Credit Score (300-1000), starting from a baseline of 800.

    Five independent rule groups (BMI, activity, sleep, blood pressure,
    habits) each add or deduct a fixed weight when their field is present.

    Always holds:
        CREDIT_BASELINE + sum(weight_breakdown.values()) == pre-clamp score

    Trend is "UP" when total additions exceed total deductions.
    """
    profile = UserProfileParams.coerce(profile)
    systolic, diastolic = parse_blood_pressure(profile.blood_pressure)

    rules = [
        _bmi_weight(safe_float(profile.bmi)),
        _activity_weight(profile.activity_level),
        _sleep_weight(safe_float(profile.sleep_hours)),
        _blood_pressure_weight(systolic, diastolic),
    ]
    if profile.smoking_status is SmokingStatus.CURRENT:
        rules.append(("Active Smoking", -100))
    if profile.alcohol_status in (AlcoholStatus.REGULAR, AlcoholStatus.HEAVY):
        rules.append(("Heavy/Regular Alcohol", -50))

    weight_breakdown: Dict[str, float] = {}
    additions = 0
    deductions = 0
    for rule in rules:
        if rule is None:
            continue
        name, weight = rule
        weight_breakdown[name] = weight
        if weight > 0:
            additions += weight
        else:
            deductions += -weight

    score = int(clamp(CREDIT_BASELINE + additions - deductions, CREDIT_MIN, CREDIT_MAX))

    return HealthCreditScoreResult(
        score=score,
        trend="UP" if additions > deductions else "DOWN",
        explanation=_credit_explanation(score),
        weight_breakdown=weight_breakdown,
    )


# ============================================================================
# EARLY SILENT DISEASE RADAR (CVD + Type 2 Diabetes)
# ============================================================================

CVD_BASE_RISK = 2.0
T2D_BASE_RISK = 1.0
RISK_WARNING_THRESHOLD = 15

DEFAULT_AGE = 30
DEFAULT_BMI = 24.0


def _has_family_history(history: Iterable[str], keyword: str) -> bool:
    return any(keyword in disease.lower() for disease in history)


def evaluate_disease_risks(profile: Any) -> DiseaseRiskResult:
    """
    Two linear risk accumulators, reported as 0-99 percentages.

    Cardiovascular (simplified Framingham proxy), base 2.0:
    - Age over 45: +0.5 per year
    - Male over 40: +1.5
    - Systolic >130: +3.0, and >140: a further +5.0
    - Current smoker: +10.0
    - BMI >30: +4.0
    - Family history of heart disease: +8.0

    Type 2 Diabetes (ADA risk test proxy), base 1.0:
    - BMI >=25: +5.0, and >=30: a further +8.0
    - Age >=40: +4.0
    - Sedentary: +3.0
    - Family history of diabetes: +10.0

    Age is bounded to 1-120 (default 30) and BMI to 10-60 (default 24)
    before any rule reads them. Breakdowns keep unrounded contributions,
    base included; status is "WARNING" when either risk exceeds 15.
    """
    profile = UserProfileParams.coerce(profile)

    age = clamp(safe_int(profile.age, DEFAULT_AGE), 1, 120)
    bmi = clamp(safe_float(profile.bmi, DEFAULT_BMI), 10, 60)
    systolic, _ = parse_blood_pressure(profile.blood_pressure)
    smoker = profile.smoking_status is SmokingStatus.CURRENT

    # 1. Cardiovascular
    cvd_breakdown: Dict[str, float] = {"Base Risk": CVD_BASE_RISK}
    if age > 45:
        cvd_breakdown["Age Factor"] = (age - 45) * 0.5
    if profile.is_male and age > 40:
        cvd_breakdown["Gender/Age Factor"] = 1.5
    if systolic is not None:
        if systolic > 130:
            cvd_breakdown["Elevated BP"] = 3.0
        if systolic > 140:
            cvd_breakdown["High BP"] = 5.0
    if smoker:
        cvd_breakdown["Smoking"] = 10.0
    if bmi > 30:
        cvd_breakdown["Obesity"] = 4.0
    if _has_family_history(profile.family_history, "heart"):
        cvd_breakdown["Family History"] = 8.0

    # 2. Type 2 Diabetes
    t2d_breakdown: Dict[str, float] = {"Base Risk": T2D_BASE_RISK}
    if bmi >= 25:
        t2d_breakdown["Overweight"] = 5.0
    if bmi >= 30:
        t2d_breakdown["Obese"] = 8.0
    if age >= 40:
        t2d_breakdown["Age Factor"] = 4.0
    if profile.is_sedentary:
        t2d_breakdown["Sedentary Activity"] = 3.0
    if _has_family_history(profile.family_history, "diabetes"):
        t2d_breakdown["Family History"] = 10.0

    cvd_risk = clamp(sum(cvd_breakdown.values()), 0, 99)
    t2d_risk = clamp(sum(t2d_breakdown.values()), 0, 99)

    return DiseaseRiskResult(
        cardiovascular_percentage=round_half_up(cvd_risk),
        type2_diabetes_percentage=round_half_up(t2d_risk),
        status="WARNING" if (cvd_risk > RISK_WARNING_THRESHOLD or t2d_risk > RISK_WARNING_THRESHOLD) else "CLEAR",
        cvd_breakdown=cvd_breakdown,
        t2d_breakdown=t2d_breakdown,
    )


# ============================================================================
# MENTAL COMPANION SCORE (PHQ-2 / GAD-2 proxy)
# ============================================================================

MENTAL_BASELINE = 50


def evaluate_mental_health(mood_logs: Optional[Iterable[Any]], sleep_hours_avg: Any) -> MentalHealthResult:
    """
    Mental wellness score (0-100) from recent mood logs and average sleep.

    Mood logs are on a 1-5 scale and map onto 20-100 (average x 20).
    With no usable logs the score starts from a neutral 50.
    Sleep under 5h: -15. Sleep over 8h: +5.

    Risk band: <40 High, 40-59 Moderate, >=60 Low.
    """
    moods = [m for m in (safe_float(v) for v in (mood_logs or [])) if m is not None]

    breakdown: Dict[str, float] = {}
    if moods:
        score = sum(moods) / len(moods) * 20
        breakdown["Mood Logs Scale"] = score
    else:
        score = MENTAL_BASELINE
        breakdown["Base Neutral"] = MENTAL_BASELINE

    sleep = safe_float(sleep_hours_avg)
    if sleep is not None:
        if sleep < 5:
            score -= 15
            breakdown["Poor Sleep Penalty"] = -15
        elif sleep > 8:
            score += 5
            breakdown["Restorative Sleep Bonus"] = 5

    score = clamp(score, 0, 100)

    if score < 40:
        risk_band = "High"
    elif score < 60:
        risk_band = "Moderate"
    else:
        risk_band = "Low"

    return MentalHealthResult(
        mental_score=round_half_up(score),
        risk_band=risk_band,
        breakdown=breakdown,
    )


# ============================================================================
# LIFESTYLE OPTIMIZER (10-100)
# ============================================================================

LIFESTYLE_BASELINE = 50

RECOMMENDATIONS = {
    "meals": "Stable Glucose: Aim for 3 structured meals to prevent insulin spikes and energy dips.",
    "hydration_critical": "Cellular Hydration: Your current intake is critical. Aim for 2.5L+ to support renal function.",
    "hydration_boost": "Hydration Optimization: Increase water by 2 glasses to reach the peak metabolic hydration zone.",
    "cardio": "Zone 2 Cardio: Try 30 mins of brisk walking to significantly lower all-cause mortality risk.",
    "exercise_praise": "Peak Performance: Your 30+ min routine is excellent for mitochondrial health.",
    "sugar": "Glycemic Load: High sugar detected. Swap simple carbs for complex grains to avoid metabolic fatigue.",
    "vegetables": "Micronutrient Gap: Increase leafy greens to ensure adequate magnesium and nitrate levels.",
}


def _normalized(text: Any) -> str:
    return text.strip().lower() if isinstance(text, str) else ""


def evaluate_lifestyle(answers: Any) -> LifestyleResult:
    """
    Lifestyle score (10-100) from a short questionnaire, starting at 50.

    Recommendations are appended in the order the rules run:
    meals, water, exercise, sugar, vegetables. Unanswered meals, water and
    exercise questions fall into the non-penalised branch of their rule.

    Tier: >=85 Optimal, >=60 Balanced, else High Risk.
    """
    answers = LifestyleAnswers.coerce(answers)
    meals = safe_float(answers.meals_per_day)
    water = safe_float(answers.water_intake)
    exercise = safe_float(answers.exercise_minutes)

    score = LIFESTYLE_BASELINE
    recommendations: List[str] = []

    if meals is not None and meals < 3:
        score -= 10
        recommendations.append(RECOMMENDATIONS["meals"])
    else:
        score += 10

    if water is not None and water < 4:
        score -= 15
        recommendations.append(RECOMMENDATIONS["hydration_critical"])
    elif water is not None and water >= 8:
        score += 15
    else:
        # 4-7 glasses: no score change, still worth a nudge
        recommendations.append(RECOMMENDATIONS["hydration_boost"])

    if exercise is not None and exercise < 30:
        score -= 20
        recommendations.append(RECOMMENDATIONS["cardio"])
    else:
        score += 20
        recommendations.append(RECOMMENDATIONS["exercise_praise"])

    if _normalized(answers.sugar_intake) == "high":
        score -= 15
        recommendations.append(RECOMMENDATIONS["sugar"])

    if _normalized(answers.veg_intake) == "low":
        score -= 10
        recommendations.append(RECOMMENDATIONS["vegetables"])

    score = int(clamp(score, 10, 100))

    if score >= 85:
        tier = "Optimal"
    elif score >= 60:
        tier = "Balanced"
    else:
        tier = "High Risk"

    return LifestyleResult(score=score, tier=tier, recommendations=recommendations)


# ============================================================================
# FAMILY GENETIC RISK
# ============================================================================

RELATION_WEIGHTS = {
    "parent": 30,
    "grandparent": 15,
}
DEFAULT_RELATION_WEIGHT = 10

# Category -> keywords matched case-insensitively inside each condition
GENETIC_CATEGORIES = {
    "diabetes": ("diabetes",),
    "heartDisease": ("heart",),
    "cancer": ("cancer",),
    "hypertension": ("blood pressure", "hypertension"),
}


def evaluate_genetic_risk(family_tree: Optional[Iterable[Any]]) -> List[GeneticRiskResult]:
    """
    Inherited risk per disease category from a family tree.

    Each condition of a relative adds that relative's weight
    (Parent 30, Grandparent 15, anyone else 10) to every category whose
    keyword it contains. Totals are capped at 100.

    Tier: >=60 High, >=30 Moderate, else Low.
    Categories with no contribution are left out of the result.
    """
    totals = {category: 0 for category in GENETIC_CATEGORIES}

    for raw_member in family_tree or []:
        member = FamilyMember.coerce(raw_member)
        weight = RELATION_WEIGHTS.get(member.relation.strip().lower(), DEFAULT_RELATION_WEIGHT)
        for condition in member.conditions:
            text = condition.lower()
            for category, keywords in GENETIC_CATEGORIES.items():
                if any(keyword in text for keyword in keywords):
                    totals[category] += weight

    results = []
    for category, total in totals.items():
        risk = int(clamp(total, 0, 100))
        if risk == 0:
            continue
        if risk >= 60:
            tier = "High"
        elif risk >= 30:
            tier = "Moderate"
        else:
            tier = "Low"
        results.append(GeneticRiskResult(condition=category, risk_percentage=risk, tier=tier))
    return results
