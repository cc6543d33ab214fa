"""
Patient to provider matching.

A provider's score for a patient is additive, with no cap:

    exact zip code in the provider's zip set      +50
    else a provider zip within nearby distance    +25
    patient area / provider borough overlap       +30
    insurance network overlap                     +40
    any weekly availability                       +20
    spare capacity (utilization below threshold)  +(threshold - utilization) / 4

Zip proximity compares zip codes as integers. Numerically close zip codes
are usually, but not always, geographically close.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from src.scheduling.availability import provider_availability
from src.scheduling.utilization import round_half_up
from src.services.record_repository import Record
from src.settings import settings

logger = logging.getLogger(__name__)

EXACT_ZIP_POINTS = 50
NEARBY_ZIP_POINTS = 25
BOROUGH_POINTS = 30
INSURANCE_POINTS = 40
AVAILABILITY_POINTS = 20

ZIP_CODE_FIELDS = ("zipCodes", "serviceZipCodes", "serviceAreaZipCodes")

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


@dataclass
class MatchEvaluation:
    """Score of one provider for one patient, with the reasons behind it."""

    score: int = 0
    reasons: list[str] = field(default_factory=list)


@dataclass
class ProviderMatch:
    """A candidate provider for a patient."""

    provider: Record
    match_score: int
    reasons: list[str]


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str) and value.strip():
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _zip_number(value: str) -> int | None:
    match = _LEADING_DIGITS.match(value)
    return int(match.group(1)) if match else None


def provider_zip_codes(provider: Record) -> list[str]:
    """All zip codes a provider serves, across the fields imports store them in."""
    zip_codes: list[str] = []
    for field_name in ZIP_CODE_FIELDS:
        for zip_code in _as_list(provider.get(field_name)):
            if zip_code not in zip_codes:
                zip_codes.append(zip_code)
    return zip_codes


def patient_area(patient: Record) -> str:
    """Area a patient lives in: ``area``, else ``borough``, else ``city``."""
    for field_name in ("area", "borough", "city"):
        value = patient.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _utilization_percentage(provider: Record) -> float | None:
    stats = provider.get("utilizationStats")
    if not isinstance(stats, dict):
        return None
    value = stats.get("utilizationPercentage")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def evaluate_match(patient: Record, provider: Record) -> MatchEvaluation:
    """
    Score a provider for a patient and collect the reasons in one pass.

    Args:
        patient: Patient record (``zipCode``, ``area``, ``insurance``)
        provider: Provider record (zip codes, ``borough``, ``insuranceNetworks``,
            ``availability``, ``utilizationStats``)

    Returns:
        MatchEvaluation with the half-up rounded score and display reasons
    """
    score = 0.0
    reasons: list[str] = []

    patient_zip = str(patient.get("zipCode") or "").strip()
    zip_codes = provider_zip_codes(provider)
    if patient_zip and zip_codes:
        if patient_zip in zip_codes:
            score += EXACT_ZIP_POINTS
            reasons.append("Exact zip code match")
        else:
            patient_number = _zip_number(patient_zip)
            if patient_number is not None:
                for zip_code in zip_codes:
                    number = _zip_number(zip_code)
                    if number is None:
                        continue
                    if abs(patient_number - number) <= settings.nearby_zip_distance:
                        score += NEARBY_ZIP_POINTS
                        reasons.append(f"Nearby zip code: {zip_code}")
                        break

    area = patient_area(patient)
    borough = str(provider.get("borough") or "").strip()
    if area and borough and _overlaps(area, borough):
        score += BOROUGH_POINTS
        reasons.append("Borough match")

    insurance = str(patient.get("insurance") or "").strip()
    if insurance:
        for network in _as_list(provider.get("insuranceNetworks")):
            if _overlaps(network, insurance):
                score += INSURANCE_POINTS
                reasons.append(f"Insurance: {network}")
                break

    schedule = provider_availability(provider)
    if schedule is not None and schedule.total_weekly_hours > 0:
        score += AVAILABILITY_POINTS

    utilization = _utilization_percentage(provider)
    if utilization is not None and utilization < settings.capacity_bonus_threshold:
        score += (settings.capacity_bonus_threshold - utilization) / 4
        reasons.append(f"Available capacity: {100 - utilization:g}%")

    return MatchEvaluation(score=round_half_up(score), reasons=reasons)


def calculate_match_score(patient: Record, provider: Record) -> int:
    return evaluate_match(patient, provider).score


def get_match_reasons(patient: Record, provider: Record) -> list[str]:
    return evaluate_match(patient, provider).reasons


def find_matching_providers(patient: Record, providers: list[Record]) -> list[ProviderMatch]:
    """
    Rank active providers with availability for a patient.

    Providers scoring zero are left out. Ties keep the input order.
    """
    matches: list[ProviderMatch] = []
    for provider in providers:
        if str(provider.get("status") or "").lower() != "active":
            continue
        if provider_availability(provider) is None:
            continue

        evaluation = evaluate_match(patient, provider)
        if evaluation.score > 0:
            matches.append(
                ProviderMatch(
                    provider=provider,
                    match_score=evaluation.score,
                    reasons=evaluation.reasons,
                )
            )

    matches.sort(key=lambda m: m.match_score, reverse=True)
    logger.debug("Found %d matching providers for patient %s", len(matches), patient.get("id"))
    return matches
