"""Transfer candidate scoring and classification."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerlink.domain.entities import (
    AmountMatchType,
    CandidateAssessment,
    ConfidenceBand,
    TransferCandidate,
)

HIGH_CONFIDENCE = 90
MEDIUM_CONFIDENCE = 70

EXACT_TOLERANCE = Decimal("0.001")
FOREX_1PCT_TOLERANCE = Decimal("0.01")
FOREX_2PCT_TOLERANCE = Decimal("0.02")

MISSING_EXCHANGE_RATE = "missing_exchange_rate"

TRANSFER_KEYWORDS = (
    "TRANSFER",
    "TFR",
    "BR TO BR",
    "ONLINE BANKING",
    "E-TRANSFER",
    "ETRANSFER",
    "INTERAC",
    "PAYMENT",
    "WIRE",
    "FX",
    "FOREX",
    "CONVERSION",
    "LOAN",
    "LOC",
    "WITHDRAWAL",
    "DEPOSIT",
    "LINE OF CREDIT",
    "WWW TFR",
    "VIN0",
)

_AMOUNT_POINTS = {
    AmountMatchType.EXACT: 40,
    AmountMatchType.FOREX_1PCT: 35,
    AmountMatchType.FOREX_2PCT: 25,
    AmountMatchType.NO_MATCH: 0,
}

_DATE_POINTS = {0: 30, 1: 20, 2: 10, 3: 5}


def confidence_band(score: int) -> ConfidenceBand:
    """Classify a 0-100 confidence score into a review band."""
    if score >= HIGH_CONFIDENCE:
        return ConfidenceBand.HIGH
    if score >= MEDIUM_CONFIDENCE:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def calculate_confidence_score(
    amount_match_type: AmountMatchType,
    date_diff_days: int,
    same_company: bool,
    has_keywords: bool,
) -> int:
    """Combine the heuristic factors into a 0-100 score."""
    score = _AMOUNT_POINTS[amount_match_type]
    score += _DATE_POINTS.get(date_diff_days, 0)
    if same_company:
        score += 20
    if has_keywords:
        score += 10
    return score


def has_transfer_keywords(description: Optional[str]) -> bool:
    """Return True if a description uses internal-movement vocabulary."""
    if not description:
        return False
    upper = description.upper()
    return any(keyword in upper for keyword in TRANSFER_KEYWORDS)


def days_between(first: date, second: date) -> int:
    return abs((second - first).days)


def classify_amount_match(
    amount_from: Decimal, amount_to: Decimal, exchange_rate: Decimal = Decimal("1"), same_currency: bool = True
) -> AmountMatchType:
    """Classify how closely two leg amounts agree.

    Args:
        amount_from: Amount leaving the source account
        amount_to: Amount arriving at the destination account
        exchange_rate: Rate converting the source currency into the destination's
        same_currency: Whether both legs share a currency

    Returns:
        AmountMatchType
    """
    source = abs(amount_from)
    target = abs(amount_to)

    if same_currency:
        if abs(source - target) <= source * EXACT_TOLERANCE:
            return AmountMatchType.EXACT
        return AmountMatchType.NO_MATCH

    expected = source * exchange_rate
    if expected == 0:
        return AmountMatchType.NO_MATCH
    ratio = abs(target - expected) / expected
    if ratio <= FOREX_1PCT_TOLERANCE:
        return AmountMatchType.FOREX_1PCT
    if ratio <= FOREX_2PCT_TOLERANCE:
        return AmountMatchType.FOREX_2PCT
    return AmountMatchType.NO_MATCH


def assess_candidate(candidate: TransferCandidate) -> CandidateAssessment:
    """Interpret a candidate's upstream score for review.

    Cross-company candidates always need manual review. A cross-currency
    candidate without an exchange rate is flagged as a data-quality issue
    instead of being treated as a normal match.
    """
    issues: list[str] = []
    if candidate.missing_exchange_rate:
        issues.append(MISSING_EXCHANGE_RATE)

    band = confidence_band(candidate.confidence_score)
    requires_manual_review = (
        candidate.is_cross_company or bool(issues) or band != ConfidenceBand.HIGH
    )
    return CandidateAssessment(
        band=band,
        requires_manual_review=requires_manual_review,
        data_quality_issues=tuple(issues),
    )
