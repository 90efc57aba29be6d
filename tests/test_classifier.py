"""
Unit tests for the rule-based document classifier.

Uses synthetic document text; no API calls.
"""

import pytest

from gasdoc.classifier import RULES, DocumentClassifier
from gasdoc.schemas import ClassificationResult, DocumentSignals, DocumentType, Language


ARTHIT_STATEMENT = """
PTTEP
STATEMENT OF ACCOUNT
Arthit Gas
Statement No. 08-18/2025
Total Sale Volume      9,580,877.000 MMBTU     2,587,457,630.82 THB
CTEP Sale Volume       1,234,567.000 MMBTU
"""

OPERATOR_STATEMENT = """
OPERATOR'S STATEMENT NUMBER 41
Gas sales from G1/61, G2/61 and G12/48 platforms
Total Sale Volume 23,809,500.000 MMBTU
CTEP Sale Volume 1,000,000.000 MMBTU
"""

C5_MEMO = """
บันทึกข้อความ
เรื่อง ค่าก๊าซฯแหล่ง C5 และ G4/48
ปริมาณความร้อน 1,203,441.50 MMBTU
จำนวนเงินรวม 9,862,110.37 USD
Chevron Thailand Exploration and Production, Ltd.
"""

B8_INVOICES = """
ใบแจ้งหนี้ แปลง B8/32 (เบญจมาศ) ประจำเดือน สิงหาคม 2568
Heat Quantity 2,004,118.00 MMBTU
Vendor                              Invoice No.    Amount Excl VAT
Alpha Offshore Co., Ltd.            A-1001         1,250,000.00
Beta Marine Services Co., Ltd.      B-2001         830,400.50
Gamma Engineering Ltd.              G-3001         415,000.00
"""


class TestDocumentClassifier:
    """Tests for DocumentClassifier class."""

    @pytest.fixture
    def classifier(self):
        return DocumentClassifier()

    def test_classify_arthit_statement(self, classifier):
        """Statement of Account + Arthit is a single-platform statement."""
        result = classifier.classify(ARTHIT_STATEMENT.encode("utf-8"))

        assert isinstance(result, ClassificationResult)
        assert result.document_type == DocumentType.SINGLE_PLATFORM_STATEMENT
        assert result.confidence == 100
        assert result.matched_rule == "statement_of_account"
        assert result.detected_features.platforms == ["Arthit"]
        assert result.detected_features.structural_flags["hasStatementOfAccount"]
        assert result.detected_features.structural_flags["hasCTEPSaleVolume"]

    def test_statement_of_account_preempts_multi_platform(self, classifier):
        """Rule 1 wins even when several supply platforms are present."""
        text = ARTHIT_STATEMENT + "\nAllocation with G1/61 and G2/61\n"
        result = classifier.classify(text)

        assert result.document_type == DocumentType.SINGLE_PLATFORM_STATEMENT
        assert 90 <= result.confidence <= 100
        assert result.detected_features.platforms == ["Arthit", "G1", "G2"]
        assert "pre-empted" in result.reasoning
        assert "supply_multi_platform" in result.reasoning

    def test_classify_field_purchase_invoice(self, classifier):
        result = classifier.classify(C5_MEMO)

        assert result.document_type == DocumentType.FIELD_PURCHASE_INVOICE
        assert result.confidence == 100
        assert result.detected_features.platforms == ["C5", "G4/48"]
        assert result.detected_features.language == Language.MIXED

    def test_single_dual_field_code_is_enough(self, classifier):
        result = classifier.classify("Invoice register for G4-48 gas purchase")

        assert result.document_type == DocumentType.FIELD_PURCHASE_INVOICE
        assert 85 <= result.confidence < 100

    @pytest.mark.parametrize("text", [
        "OPERATOR'S STATEMENT G1/61 G2/61 see Appendix C 5 for details",
        "OPERATOR'S STATEMENT G1/61 G2/61, schedule B 8/32 attached",
        "OPERATOR'S STATEMENT G1/61 G2/61, form G 4/48 enclosed",
    ])
    def test_spaced_letters_and_digits_are_not_platform_codes(self, classifier, text):
        result = classifier.classify(text)

        assert result.document_type == DocumentType.SUPPLY_MULTI_PLATFORM
        assert result.detected_features.platforms == ["G1", "G2"]

    def test_classify_multi_platform_supply(self, classifier):
        result = classifier.classify(OPERATOR_STATEMENT)

        assert result.document_type == DocumentType.SUPPLY_MULTI_PLATFORM
        assert result.confidence == 100
        assert result.detected_features.platforms == ["G1", "G2", "G12"]
        assert result.detected_features.structural_flags["hasOperatorStatement"]

    def test_arthit_with_supply_platform_is_multi_platform(self, classifier):
        result = classifier.classify("Operator's Statement: Arthit and G1 deliveries")

        assert result.document_type == DocumentType.SUPPLY_MULTI_PLATFORM
        assert result.matched_rule == "multiple_supply_platforms"
        assert 80 <= result.confidence <= 100

    def test_arthit_alone_defaults_to_supply(self, classifier):
        result = classifier.classify("Arthit gas sales summary\nTotal Sale Volume 9,580,877 MMBTU")

        assert result.document_type == DocumentType.SUPPLY_MULTI_PLATFORM
        assert result.matched_rule == "single_field_without_statement"
        assert 70 <= result.confidence <= 90

    def test_classify_multi_vendor_platform_invoice(self, classifier):
        result = classifier.classify(B8_INVOICES)

        assert result.document_type == DocumentType.MULTI_VENDOR_PLATFORM_INVOICE
        assert result.confidence == 100
        assert result.detected_features.platforms == ["B8/32", "Benchamas"]
        assert result.detected_features.structural_flags["hasMultipleVendors"]

    def test_single_platform_needs_three_vendors(self, classifier):
        text = "B8/32 service invoice\nAlpha Offshore Co., Ltd. 1,000.00\nBeta Marine Co., Ltd. 2,000.00"
        result = classifier.classify(text)

        assert result.document_type == DocumentType.UNKNOWN
        assert result.detected_features.platforms == ["B8/32"]

    def test_unknown_reports_platforms_found(self, classifier):
        """A single supply platform is not enough, but it is still reported."""
        result = classifier.classify("Operator's Statement for G1 only. Total Sale Volume 100 MMBTU")

        assert result.document_type == DocumentType.UNKNOWN
        assert 0 < result.confidence <= 29
        assert result.detected_features.platforms == ["G1"]
        assert "no rule matched" in result.reasoning

    @pytest.mark.parametrize("content", [b"", "", None, b"\x00\xff\xfe\x81", "lorem ipsum dolor sit amet"])
    def test_garbage_is_unknown_with_zero_confidence(self, classifier, content):
        result = classifier.classify(content)

        assert result.document_type == DocumentType.UNKNOWN
        assert result.confidence == 0
        assert result.detected_features.platforms == []
        assert "no recognized structural or terminology signals." in result.reasoning

    def test_reasoning_explains_rejected_types(self, classifier):
        result = classifier.classify(OPERATOR_STATEMENT)

        assert "not single_platform_statement" in result.reasoning
        assert "not field_purchase_invoice" in result.reasoning
        assert "not multi_vendor_platform_invoice: pre-empted" in result.reasoning

    def test_classify_batch(self, classifier):
        results = classifier.classify_batch([ARTHIT_STATEMENT, OPERATOR_STATEMENT, ""])

        assert [r.document_type for r in results] == [
            DocumentType.SINGLE_PLATFORM_STATEMENT,
            DocumentType.SUPPLY_MULTI_PLATFORM,
            DocumentType.UNKNOWN,
        ]

    def test_custom_signal_source(self):
        """The classifier reasons over whatever bundle its source returns."""

        class FixedSignals:
            def detect_signals(self, content, timeout=None):
                return DocumentSignals(platforms=["C5"], has_heat_quantity_section=True)

        result = DocumentClassifier(signal_source=FixedSignals()).classify(b"%PDF-1.7 ...")

        assert result.document_type == DocumentType.FIELD_PURCHASE_INVOICE


class TestConfidenceScoring:
    """Confidence grows with corroborating signals and stays in each rule's range."""

    def test_more_signals_never_lower_confidence(self):
        classifier = DocumentClassifier()
        bare = classifier.classify_signals(DocumentSignals(platforms=["Arthit"]))
        richer = classifier.classify_signals(
            DocumentSignals(platforms=["Arthit"], has_total_sale_volume=True)
        )
        richest = classifier.classify_signals(
            DocumentSignals(
                platforms=["Arthit"],
                has_total_sale_volume=True,
                has_ctep_sale_volume=True,
                has_operator_statement=True,
            )
        )

        assert bare.confidence == 70
        assert bare.confidence < richer.confidence < richest.confidence
        assert richest.confidence == 90

    @pytest.mark.parametrize("rule", RULES, ids=lambda r: r.name)
    def test_scores_stay_within_rule_bounds(self, rule):
        everything = DocumentSignals(
            platforms=["Arthit", "G1", "G2", "G12", "C5", "G4/48", "B8/32"],
            has_statement_of_account=True,
            has_operator_statement=True,
            has_statement_number=True,
            has_total_sale_volume=True,
            has_ctep_sale_volume=True,
            has_heat_quantity_section=True,
            has_accounting_data=True,
            has_vendor_invoice_table=True,
            has_invoice_term=True,
            vendor_names=["Chevron Thailand Co., Ltd.", "B Ltd.", "C Ltd."],
        )
        for signals in (DocumentSignals(), everything):
            score, fired = rule.score(signals)
            assert rule.low <= score <= rule.high

    def test_unknown_confidence_is_capped(self):
        signals = DocumentSignals(
            platforms=["JDA A-18", "JDA B-17"],
            has_total_sale_volume=True,
            has_ctep_sale_volume=True,
            has_heat_quantity_section=True,
            has_accounting_data=True,
            has_vendor_invoice_table=True,
        )
        result = DocumentClassifier().classify_signals(signals)

        assert result.document_type == DocumentType.UNKNOWN
        assert result.confidence == 29


class TestClassificationResult:
    """Tests for ClassificationResult schema."""

    def test_confidence_bounds(self):
        ClassificationResult(document_type=DocumentType.UNKNOWN, confidence=0)
        ClassificationResult(document_type=DocumentType.SUPPLY_MULTI_PLATFORM, confidence=100)

        with pytest.raises(ValueError):
            ClassificationResult(document_type=DocumentType.UNKNOWN, confidence=100.5)

        with pytest.raises(ValueError):
            ClassificationResult(document_type=DocumentType.UNKNOWN, confidence=-1)
