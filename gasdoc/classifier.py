"""
Rule-based document classifier.

Classification runs an ordered list of rules over the signal bundle of a
document and stops at the first rule that matches. Earlier rules pre-empt
later ones: a Statement of Account for Arthit is a single-platform
statement even when G1/G2 also appear on the page.

Each rule has a confidence range. Within the range the score grows with
the number of corroborating signals that fired, so two documents of the
same type can be ranked by how much evidence they carry.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .schemas import ClassificationResult, DetectedFeatures, DocumentSignals, DocumentType
from .signals import DUAL_FIELD, SINGLE_FIELD, SINGLE_PLATFORM_GROUP, SUPPLY_GROUP, TextSignalDetector

UNKNOWN_CONFIDENCE_CEILING = 29
UNKNOWN_POINTS_PER_SIGNAL = 5
NO_SIGNALS_REASON = "no recognized structural or terminology signals."

Predicate = Callable[[DocumentSignals], bool]


@dataclass(frozen=True)
class ClassificationRule:
    """One guarded rule of the decision procedure."""
    name: str
    document_type: DocumentType
    requirement: str
    matches: Predicate
    decisive: Callable[[DocumentSignals], str]
    corroborating: tuple[tuple[str, Predicate], ...]
    low: int
    high: int

    def score(self, signals: DocumentSignals) -> tuple[int, list[str]]:
        """Confidence within [low, high] and the corroborating signals that fired."""
        fired = [label for label, check in self.corroborating if check(signals)]
        if not self.corroborating:
            return self.high, fired
        span = self.high - self.low
        return self.low + round(span * len(fired) / len(self.corroborating)), fired


def _platforms(signals: DocumentSignals) -> set[str]:
    return set(signals.platforms)


def _found(signals: DocumentSignals, group) -> list[str]:
    return [p for p in signals.platforms if p in group]


def _is_statement_of_account(s: DocumentSignals) -> bool:
    return s.has_statement_of_account and SINGLE_FIELD in _platforms(s)


def _is_dual_field(s: DocumentSignals) -> bool:
    return bool(_platforms(s) & set(DUAL_FIELD))


def _is_multi_platform_supply(s: DocumentSignals) -> bool:
    supply = _platforms(s) & set(SUPPLY_GROUP)
    return bool(supply) and len(supply | (_platforms(s) & {SINGLE_FIELD})) >= 2


def _is_single_field_alone(s: DocumentSignals) -> bool:
    return SINGLE_FIELD in _platforms(s)


def _is_multi_vendor_platform(s: DocumentSignals) -> bool:
    return bool(_platforms(s) & set(SINGLE_PLATFORM_GROUP)) and len(s.vendor_names) >= 3


def _has_known_purchase_vendor(s: DocumentSignals) -> bool:
    return any("chevron" in v.lower() or "mitsui" in v.lower() for v in s.vendor_names)


RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="statement_of_account",
        document_type=DocumentType.SINGLE_PLATFORM_STATEMENT,
        requirement="needs a 'Statement of Account' header together with Arthit",
        matches=_is_statement_of_account,
        decisive=lambda s: "'Statement of Account' header with the Arthit platform",
        corroborating=(
            ("Total Sale Volume", lambda s: s.has_total_sale_volume),
            ("CTEP Sale Volume", lambda s: s.has_ctep_sale_volume),
            ("statement number format", lambda s: s.has_statement_number),
            ("single platform focus", lambda s: _platforms(s) == {SINGLE_FIELD}),
        ),
        low=90,
        high=100,
    ),
    ClassificationRule(
        name="dual_field_codes",
        document_type=DocumentType.FIELD_PURCHASE_INVOICE,
        requirement="needs an explicit C5 or G4/48 field code",
        matches=_is_dual_field,
        decisive=lambda s: "field code(s) " + ", ".join(_found(s, DUAL_FIELD)),
        corroborating=(
            ("both C5 and G4/48", lambda s: set(DUAL_FIELD) <= _platforms(s)),
            ("heat quantity section", lambda s: s.has_heat_quantity_section),
            ("accounting section", lambda s: s.has_accounting_data),
            ("Chevron/Mitsui vendor", _has_known_purchase_vendor),
        ),
        low=85,
        high=100,
    ),
    ClassificationRule(
        name="multiple_supply_platforms",
        document_type=DocumentType.SUPPLY_MULTI_PLATFORM,
        requirement="needs two or more platforms from G1/G2/G12/Arthit",
        matches=_is_multi_platform_supply,
        decisive=lambda s: "multiple supply platforms " + ", ".join(_found(s, SUPPLY_GROUP + (SINGLE_FIELD,))),
        corroborating=(
            ("Operator's Statement", lambda s: s.has_operator_statement),
            ("Total Sale Volume", lambda s: s.has_total_sale_volume),
            ("CTEP Sale Volume", lambda s: s.has_ctep_sale_volume),
            ("three or more platforms", lambda s: len(_found(s, SUPPLY_GROUP + (SINGLE_FIELD,))) >= 3),
        ),
        low=80,
        high=100,
    ),
    ClassificationRule(
        name="single_field_without_statement",
        document_type=DocumentType.SUPPLY_MULTI_PLATFORM,
        requirement="or Arthit mentioned on its own",
        matches=_is_single_field_alone,
        decisive=lambda s: "Arthit without a 'Statement of Account' header, treated as part of a consolidated statement",
        corroborating=(
            ("Operator's Statement", lambda s: s.has_operator_statement),
            ("Total Sale Volume", lambda s: s.has_total_sale_volume),
            ("CTEP Sale Volume", lambda s: s.has_ctep_sale_volume),
        ),
        low=70,
        high=90,
    ),
    ClassificationRule(
        name="multi_vendor_platform",
        document_type=DocumentType.MULTI_VENDOR_PLATFORM_INVOICE,
        requirement="needs B8/32 (Benchamas, Pailin) with 3+ distinct vendors",
        matches=_is_multi_vendor_platform,
        decisive=lambda s: "{} with {} distinct vendors".format(
            ", ".join(_found(s, SINGLE_PLATFORM_GROUP)), len(s.vendor_names)
        ),
        corroborating=(
            ("vendor invoice table", lambda s: s.has_vendor_invoice_table),
            ("heat quantity section", lambda s: s.has_heat_quantity_section),
            ("invoice term ใบแจ้งหนี้", lambda s: s.has_invoice_term),
        ),
        low=75,
        high=100,
    ),
)


def structural_flags(signals: DocumentSignals) -> dict[str, bool]:
    """Named boolean indicators reported in DetectedFeatures."""
    return {
        "hasMultiplePlatforms": len(signals.platforms) >= 2,
        "hasMultipleVendors": len(signals.vendor_names) >= 2,
        "hasOperatorStatement": signals.has_operator_statement,
        "hasSingleFieldFocus": len(signals.platforms) == 1,
        "hasStatementOfAccount": signals.has_statement_of_account,
        "hasStatementNumber": signals.has_statement_number,
        "hasTotalSaleVolume": signals.has_total_sale_volume,
        "hasCTEPSaleVolume": signals.has_ctep_sale_volume,
        "hasHeatQuantitySection": signals.has_heat_quantity_section,
        "hasVendorInvoiceTable": signals.has_vendor_invoice_table,
        "hasAccountingData": signals.has_accounting_data,
        "hasInvoiceTerm": signals.has_invoice_term,
    }


def _rejections(winner: Optional[ClassificationRule], signals: DocumentSignals) -> list[str]:
    """Explain, once per competing type, why it was not chosen."""
    unmet: dict[DocumentType, list[str]] = {}
    preempted: list[DocumentType] = []
    reached_winner = False
    for rule in RULES:
        if rule is winner:
            reached_winner = True
            continue
        if winner is not None and rule.document_type == winner.document_type:
            continue
        if reached_winner:
            if rule.document_type not in unmet and rule.document_type not in preempted:
                preempted.append(rule.document_type)
        else:
            unmet.setdefault(rule.document_type, []).append(rule.requirement)

    lines = [f"not {t.value}: {' '.join(reqs)}" for t, reqs in unmet.items()]
    lines += [f"not {t.value}: pre-empted by rule '{winner.name}'" for t in preempted]
    return lines


class DocumentClassifier:
    """
    Classifies gas billing documents with an ordered rule list.

    Usage:
        classifier = DocumentClassifier()
        result = classifier.classify(pdf_bytes_or_text)
        result.document_type, result.confidence  # e.g. supply_multi_platform, 90
    """

    def __init__(self, signal_source=None, rules: tuple[ClassificationRule, ...] = RULES):
        """
        Initialize the classifier.

        Args:
            signal_source: Object with detect_signals(content, timeout=None).
                Defaults to TextSignalDetector.
            rules: Ordered rules; the first match wins.
        """
        self.signal_source = signal_source or TextSignalDetector()
        self.rules = rules

    def classify(self, content, timeout: Optional[float] = None) -> ClassificationResult:
        """
        Classify a single document.

        Malformed or empty content yields `unknown` with confidence 0.
        Errors of the signal source (ExtractorUnavailableError) propagate.
        """
        signals = self.signal_source.detect_signals(content, timeout=timeout)
        return self.classify_signals(signals)

    def classify_batch(self, contents: list, timeout: Optional[float] = None) -> list[ClassificationResult]:
        return [self.classify(content, timeout=timeout) for content in contents]

    def classify_signals(self, signals: DocumentSignals) -> ClassificationResult:
        """Run the decision procedure over an already gathered signal bundle."""
        features = DetectedFeatures(
            platforms=list(signals.platforms),
            structural_flags=structural_flags(signals),
            language=signals.language,
            key_terms_found=list(signals.key_terms_found),
        )

        for rule in self.rules:
            if not rule.matches(signals):
                continue
            confidence, fired = rule.score(signals)
            reasoning = f"Classified as {rule.document_type.value}: {rule.decisive(signals)}."
            if fired:
                reasoning += f" Corroborated by {', '.join(fired)}."
            rejected = _rejections(rule, signals)
            if rejected:
                reasoning += " Rejected " + "; ".join(rejected) + "."
            return ClassificationResult(
                document_type=rule.document_type,
                confidence=confidence,
                reasoning=reasoning,
                detected_features=features,
                matched_rule=rule.name,
            )

        count = signals.signal_count()
        if count == 0:
            reasoning = f"Unknown document type: {NO_SIGNALS_REASON}"
        else:
            reasoning = (
                "Unknown document type: no rule matched the signals found ("
                + ", ".join(signals.key_terms_found or signals.platforms or ["vendor names"])
                + "). Rejected " + "; ".join(_rejections(None, signals)) + "."
            )
        return ClassificationResult(
            document_type=DocumentType.UNKNOWN,
            confidence=min(UNKNOWN_CONFIDENCE_CEILING, UNKNOWN_POINTS_PER_SIGNAL * count),
            reasoning=reasoning,
            detected_features=features,
        )
