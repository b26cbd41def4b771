"""Tests for the input security pre-check."""

import pytest

from cipherscope.core.config import Settings
from cipherscope.core.exceptions import SecurityRejectedError, ValidationError
from cipherscope.models.schemas import RiskLevel
from cipherscope.services.security.validator import InputSecurityValidator


class TestInputSecurityValidator:
    """Test suite for InputSecurityValidator."""

    @pytest.fixture
    def validator(self):
        return InputSecurityValidator(Settings())

    def test_clean_input(self, validator):
        report = validator.validate("SGVsbG8gV29ybGQh")
        assert report.risk_level is RiskLevel.LOW
        assert report.threats == []
        assert report.warnings == []

    def test_script_is_high_risk_but_not_rejected(self, validator):
        report = validator.validate("<script>alert(1)</script>")
        assert report.threats == ["script_injection"]
        assert report.risk_level is RiskLevel.HIGH
        assert report.warnings

    def test_code_injection(self, validator):
        report = validator.validate("eval(atob(payload))")
        assert "code_injection" in report.threats
        assert report.risk_level is RiskLevel.HIGH

    def test_path_traversal_is_medium(self, validator):
        report = validator.validate("../../etc/passwd")
        assert report.threats == ["path_traversal"]
        assert report.risk_level is RiskLevel.MEDIUM

    def test_null_bytes(self, validator):
        assert validator.validate("abc\x00\x00\x00\x00def").threats == ["null_bytes"]

    def test_hard_limit_rejects(self):
        validator = InputSecurityValidator(Settings(security_hard_limit=10))
        with pytest.raises(SecurityRejectedError) as exc_info:
            validator.validate("x" * 11)
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.details["threats"] == ["oversized_input"]

    def test_at_limit_is_accepted(self):
        validator = InputSecurityValidator(Settings(security_hard_limit=10))
        assert validator.validate("x" * 10).risk_level is RiskLevel.LOW
