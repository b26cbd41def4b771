import logging
import re
from dataclasses import dataclass, field
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import SecurityRejectedError
from cipherscope.models.schemas import RiskLevel

logger = logging.getLogger(__name__)


@dataclass
class SecurityReport:
    """Outcome of the input pre-check."""

    risk_level: RiskLevel = RiskLevel.LOW
    threats: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class InputSecurityValidator:
    """
    Caller-level pre-check on raw input.

    Only the hard size ceiling rejects input. Threat categories are
    reported as warnings, since encoded payloads routinely contain the
    characters these scans look for.
    """

    THREAT_PATTERNS: ClassVar[dict[str, list[re.Pattern[str]]]] = {
        "script_injection": [
            re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE),
            re.compile(r"<iframe[\s\S]*?>[\s\S]*?</iframe>", re.IGNORECASE),
            re.compile(r"javascript\s*:", re.IGNORECASE),
            re.compile(r"\bon\w+\s*=\s*[\"'][^\"']*[\"']", re.IGNORECASE),
        ],
        "code_injection": [
            re.compile(r"\beval\s*\(", re.IGNORECASE),
            re.compile(r"new\s+Function\s*\(", re.IGNORECASE),
            re.compile(r"__proto__"),
            re.compile(r"\b__import__\s*\("),
        ],
        "path_traversal": [
            re.compile(r"(?:^|[/\\])\.\.(?:[/\\]|$)"),
            re.compile(r"%2e%2e", re.IGNORECASE),
            re.compile(r"%252e%252e", re.IGNORECASE),
        ],
        "null_bytes": [
            re.compile(r"\x00{4,}"),
            re.compile(r"(?:%00){2,}"),
        ],
    }

    HIGH_RISK: ClassVar[frozenset[str]] = frozenset({"script_injection", "code_injection"})

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def validate(self, text: str) -> SecurityReport:
        """
        Check input before analysis.

        Args:
            text: Raw input

        Returns:
            SecurityReport with risk level and warnings

        Raises:
            SecurityRejectedError: If input exceeds the hard size ceiling
        """
        size = len(text.encode("utf-8", errors="surrogatepass"))
        if size > self.settings.security_hard_limit:
            logger.info("Rejected input of %d bytes (hard limit %d)", size, self.settings.security_hard_limit)
            raise SecurityRejectedError(
                f"input exceeds hard size limit of {self.settings.security_hard_limit} bytes",
                ["oversized_input"],
            )

        report = SecurityReport()
        report.threats = self.detect_threats(text)
        if report.threats:
            report.risk_level = self.risk_level(report.threats)
            report.warnings.append(f"Detected potential security threats: {', '.join(report.threats)}")
        return report

    def detect_threats(self, text: str) -> list[str]:
        """Threat categories with at least one matching pattern, in table order."""
        return [
            category
            for category, patterns in self.THREAT_PATTERNS.items()
            if any(pattern.search(text) for pattern in patterns)
        ]

    def risk_level(self, threats: list[str]) -> RiskLevel:
        if any(threat in self.HIGH_RISK for threat in threats):
            return RiskLevel.HIGH
        if threats:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW
