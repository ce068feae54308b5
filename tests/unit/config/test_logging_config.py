"""Tests for logging processors."""

from facturier.config.logging import add_app_context, mask_bank_details


class TestMaskBankDetails:
    def test_masks_iban(self):
        event = mask_bank_details(None, "info", {"event": "x", "iban": "FR7630006000011234567890189"})
        assert event["iban"] == "*" * 23 + "0189"

    def test_short_values(self):
        event = mask_bank_details(None, "info", {"event": "x", "bic": "ABC"})
        assert event["bic"] == "ABC"

    def test_other_keys_untouched(self):
        event = mask_bank_details(None, "info", {"event": "x", "invoice_id": 4, "iban": None})
        assert event == {"event": "x", "invoice_id": 4, "iban": None}


class TestAppContext:
    def test_adds_app_and_environment(self):
        event = add_app_context(None, "info", {"event": "x"})
        assert event["app"] == "Facturier"
        assert "environment" in event

    def test_keeps_existing_values(self):
        event = add_app_context(None, "info", {"event": "x", "app": "cli"})
        assert event["app"] == "cli"
