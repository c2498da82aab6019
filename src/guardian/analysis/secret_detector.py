"""
Hard-coded credential detection.

Every match of every pattern becomes a finding. Raw values are masked
before they leave the detector and are never retained.
"""

import logging
import math
import re
from dataclasses import dataclass

from guardian.analysis.security_scanner import line_and_column
from guardian.core.findings import Secret, Severity, group_by_severity
from guardian.core.hash_cache import HashCache

logger = logging.getLogger(__name__)

SECRET_DETECTION_ERROR = "Error occurred during secret detection"


@dataclass(frozen=True)
class SecretPattern:
    """A credential pattern with its heuristic confidence."""

    name: str
    pattern: re.Pattern
    confidence: float
    category: str


def _secret(
    name: str, regex: str, confidence: float, category: str, flags: int = 0
) -> SecretPattern:
    return SecretPattern(name, re.compile(regex, flags | re.ASCII), confidence, category)


_I = re.IGNORECASE

SECRET_PATTERNS: tuple[SecretPattern, ...] = (
    # Cloud providers
    _secret("AWS Access Key ID", r"AKIA[0-9A-Z]{16}", 0.98, "Cloud Credentials"),
    _secret(
        "AWS Secret Access Key",
        r"""(?:aws_secret_access_key|AWS_SECRET_ACCESS_KEY)['":\s]*['"][A-Za-z0-9/+=]{40}['"]""",
        0.95,
        "Cloud Credentials",
        _I,
    ),
    _secret(
        "AWS Session Token",
        r"""(?:aws_session_token|AWS_SESSION_TOKEN)['":\s]*['"][A-Za-z0-9/+=]{100,}['"]""",
        0.95,
        "Cloud Credentials",
        _I,
    ),
    _secret(
        "Azure Storage Account Key",
        r"""(?:DefaultEndpointsProtocol=https;AccountName=|AZURE_STORAGE_ACCOUNT)['":\s]*['"][A-Za-z0-9+/=]{88}['"]""",
        0.95,
        "Cloud Credentials",
        _I,
    ),
    _secret(
        "Google Cloud Service Account",
        r"""\{[^}]*"type":\s*"service_account"[^}]*\}""",
        0.9,
        "Cloud Credentials",
        _I,
    ),
    _secret("Google API Key", r"AIza[0-9A-Za-z_-]{35}", 0.95, "Cloud Credentials"),
    # Source control and CI/CD
    _secret("GitHub Personal Access Token", r"ghp_[a-zA-Z0-9]{36}", 0.98, "Version Control"),
    _secret("GitHub Fine-grained Token", r"github_pat_[a-zA-Z0-9_]{82}", 0.98, "Version Control"),
    _secret("GitHub OAuth Token", r"gho_[a-zA-Z0-9]{36}", 0.98, "Version Control"),
    _secret("GitLab Personal Access Token", r"glpat-[a-zA-Z0-9_-]{20}", 0.98, "Version Control"),
    _secret(
        "Bitbucket App Password",
        r"""(?:bitbucket|BITBUCKET)['":\s]*['"][A-Za-z0-9]{16}['"]""",
        0.85,
        "Version Control",
        _I,
    ),
    _secret(
        "Jenkins API Token",
        r"""(?:jenkins|JENKINS)['":\s]*['"][a-f0-9]{32}['"]""",
        0.85,
        "CI/CD",
        _I,
    ),
    _secret(
        "CircleCI Token",
        r"""(?:circle[_-]?ci|CIRCLE[_-]?CI)['":\s]*['"][a-f0-9]{40}['"]""",
        0.9,
        "CI/CD",
        _I,
    ),
    _secret(
        "Travis CI Token",
        r"""(?:travis|TRAVIS)['":\s]*['"][A-Za-z0-9_-]{22}['"]""",
        0.85,
        "CI/CD",
        _I,
    ),
    # Databases
    _secret(
        "MongoDB Connection String",
        r"""mongodb(?:\+srv)?://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""",
        0.95,
        "Database",
    ),
    _secret(
        "MySQL Connection String",
        r"""mysql://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""",
        0.95,
        "Database",
    ),
    _secret(
        "PostgreSQL Connection String",
        r"""postgres(?:ql)?://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""",
        0.95,
        "Database",
    ),
    _secret(
        "Redis Connection String",
        r"""redis://[^:\s'"]*:[^@\s'"]+@[^\s'"]+""",
        0.9,
        "Database",
    ),
    _secret(
        "Database Password (Generic)",
        r"""(?:db[_-]?password|database[_-]?password|DB[_-]?PASSWORD)['":\s]*['"][^'"]{8,}['"]""",
        0.85,
        "Database",
        _I,
    ),
    _secret(
        "SQL Server Connection String",
        r"(?:server|data source)[^;]*;.*password[^;]*;",
        0.85,
        "Database",
        _I,
    ),
    # API keys
    _secret(
        "Slack Bot Token",
        r"xoxb-[0-9]{12}-[0-9]{12}-[a-zA-Z0-9]{24}",
        0.98,
        "API Keys",
    ),
    _secret(
        "Slack User Token",
        r"xoxp-[0-9]{12}-[0-9]{12}-[a-zA-Z0-9]{24}",
        0.98,
        "API Keys",
    ),
    _secret("Discord Bot Token", r"[MN][A-Za-z\d]{23}\.[\w-]{6}\.[\w-]{27}", 0.95, "API Keys"),
    _secret("Stripe API Key", r"sk_(?:live|test)_[a-zA-Z0-9]{24}", 0.98, "API Keys"),
    _secret(
        "PayPal Client ID",
        r"""(?:paypal|PAYPAL)['":\s]*['"][A-Za-z0-9_-]{80}['"]""",
        0.85,
        "API Keys",
        _I,
    ),
    _secret(
        "Twilio Auth Token",
        r"""(?:twilio|TWILIO)['":\s]*['"][a-f0-9]{32}['"]""",
        0.9,
        "API Keys",
        _I,
    ),
    _secret(
        "SendGrid API Key",
        r"SG\.[a-zA-Z0-9_-]{22}\.[a-zA-Z0-9_-]{43}",
        0.98,
        "API Keys",
    ),
    _secret("Mailgun API Key", r"key-[a-f0-9]{32}", 0.9, "API Keys"),
    # DevOps
    _secret(
        "Docker Hub Token",
        r"""(?:docker[_-]?hub|DOCKER[_-]?HUB)['":\s]*['"][a-f0-9-]{36}['"]""",
        0.85,
        "DevOps",
        _I,
    ),
    _secret(
        "Kubernetes Service Account Token",
        r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*",
        0.8,
        "DevOps",
    ),
    _secret(
        "Terraform Cloud Token",
        r"""(?:terraform|TERRAFORM)['":\s]*['"][A-Za-z0-9.]{14}['"]""",
        0.85,
        "DevOps",
        _I,
    ),
    _secret("Ansible Vault Password", r"\$ANSIBLE_VAULT;[0-9.]+;AES256", 0.98, "DevOps"),
    # Private keys, header line only
    _secret("RSA Private Key", r"-----BEGIN\s+RSA\s+PRIVATE\s+KEY-----", 1.0, "Cryptographic Keys"),
    _secret("EC Private Key", r"-----BEGIN\s+EC\s+PRIVATE\s+KEY-----", 1.0, "Cryptographic Keys"),
    _secret("DSA Private Key", r"-----BEGIN\s+DSA\s+PRIVATE\s+KEY-----", 1.0, "Cryptographic Keys"),
    _secret(
        "OpenSSH Private Key",
        r"-----BEGIN\s+OPENSSH\s+PRIVATE\s+KEY-----",
        1.0,
        "Cryptographic Keys",
    ),
    _secret(
        "PGP Private Key",
        r"-----BEGIN\s+PGP\s+PRIVATE\s+KEY\s+BLOCK-----",
        1.0,
        "Cryptographic Keys",
    ),
    _secret("Certificate Private Key", r"-----BEGIN\s+PRIVATE\s+KEY-----", 1.0, "Cryptographic Keys"),
    # Authentication and session tokens
    _secret("JWT Token", r"eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", 0.9, "Authentication"),
    _secret("Bearer Token", r"(?:bearer|Bearer)\s+[A-Za-z0-9_-]{20,}", 0.8, "Authentication"),
    _secret(
        "Session Token",
        r"""(?:session[_-]?token|SESSION[_-]?TOKEN)['":\s]*['"][A-Za-z0-9+/=]{32,}['"]""",
        0.8,
        "Authentication",
        _I,
    ),
    _secret(
        "Auth Token (Generic)",
        r"""(?:auth[_-]?token|AUTH[_-]?TOKEN)['":\s]*['"][A-Za-z0-9+/=]{20,}['"]""",
        0.75,
        "Authentication",
        _I,
    ),
    # Generic assignments
    _secret(
        "API Key (Generic)",
        r"""(?:api[_-]?key|apikey|API[_-]?KEY)['":\s]*['"][a-zA-Z0-9]{16,}['"]""",
        0.7,
        "API Keys",
        _I,
    ),
    _secret(
        "Password (Hardcoded)",
        r"""(?:password|passwd|pwd|PASSWORD)['":\s]*['"][^'"]{8,}['"]""",
        0.6,
        "Credentials",
        _I,
    ),
    _secret(
        "Secret Key (Generic)",
        r"""(?:secret[_-]?key|secretkey|SECRET[_-]?KEY)['":\s]*['"][a-zA-Z0-9]{16,}['"]""",
        0.7,
        "Credentials",
        _I,
    ),
    _secret(
        "Access Token (Generic)",
        r"""(?:access[_-]?token|ACCESS[_-]?TOKEN)['":\s]*['"][A-Za-z0-9+/=]{20,}['"]""",
        0.7,
        "Authentication",
        _I,
    ),
    # Network credentials
    _secret("FTP Credentials", r"""ftp://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""", 0.95, "Network"),
    _secret("SMTP Credentials", r"""smtp://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""", 0.9, "Network"),
    _secret("SSH Connection String", r"""ssh://[^:\s'"]+:[^@\s'"]+@[^\s'"]+""", 0.85, "Network"),
    # Personal data
    _secret(
        "Credit Card Number",
        r"\b(?:4[0-9]{12}(?:[0-9]{3})?|5[1-5][0-9]{14}|3[47][0-9]{13}|3[0-9]{13}|6(?:011|5[0-9]{2})[0-9]{12})\b",
        0.85,
        "Sensitive Data",
    ),
    _secret("Social Security Number", r"\b\d{3}-\d{2}-\d{4}\b", 0.8, "Sensitive Data"),
    _secret(
        "Email Address",
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b",
        0.5,
        "Sensitive Data",
    ),
    _secret(
        "Phone Number",
        r"\b\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b",
        0.4,
        "Sensitive Data",
    ),
)


def severity_for_confidence(confidence: float) -> Severity:
    """Map a pattern confidence to a finding severity."""
    if confidence >= 0.9:
        return Severity.CRITICAL
    if confidence >= 0.8:
        return Severity.HIGH
    if confidence >= 0.6:
        return Severity.MEDIUM
    return Severity.LOW


def mask_secret(value: str) -> str:
    """
    Mask a matched credential for display.

    Values of eight characters or fewer are fully starred. Longer values
    keep ``min(4, floor(len * 0.2))`` characters at each end.
    """
    if len(value) <= 8:
        return "*" * len(value)

    visible = min(4, math.floor(len(value) * 0.2))
    hidden = "*" * max(1, len(value) - visible * 2)
    return f"{value[:visible]}{hidden}{value[len(value) - visible:]}"


class SecretDetector:
    """Detects hard-coded credentials in source text."""

    def __init__(self, cache_size: int = 100, patterns: tuple[SecretPattern, ...] = SECRET_PATTERNS):
        self._patterns = patterns
        self._cache: HashCache[list[Secret]] = HashCache(cache_size)
        self._last: list[Secret] = []

    @property
    def cache(self) -> HashCache[list[Secret]]:
        return self._cache

    @property
    def patterns(self) -> tuple[SecretPattern, ...]:
        return self._patterns

    def find_secrets(self, code: str) -> list[Secret]:
        """Return structured secret findings for ``code``."""
        if not code or not code.strip():
            self._last = []
            return []

        cached = self._cache.get(code)
        if cached is None:
            cached = self._evaluate(code)
            self._cache.put(code, cached)

        self._last = list(cached)
        return list(cached)

    def _evaluate(self, code: str) -> list[Secret]:
        secrets: list[Secret] = []
        for secret_pattern in self._patterns:
            severity = severity_for_confidence(secret_pattern.confidence)
            for match in secret_pattern.pattern.finditer(code):
                line, column = line_and_column(code, match.start())
                secrets.append(
                    Secret(
                        severity=severity,
                        type=secret_pattern.name,
                        masked_value=mask_secret(match.group(0)),
                        confidence=secret_pattern.confidence,
                        line=line,
                        column=column,
                    )
                )
        return secrets

    def detect(self, code: str) -> list[str]:
        """
        Scan ``code`` and return formatted secret findings.

        Returns:
            ``[SEVERITY] Name: masked (confidence: NN%)`` per match; a single
            error string if the detection itself failed
        """
        try:
            secrets = self.find_secrets(code)
        except Exception as e:
            logger.error(f"Secret detection failed: {e}", exc_info=True)
            self._last = []
            return [SECRET_DETECTION_ERROR]
        return [secret.format() for secret in secrets]

    def get_secret_records(self) -> list[Secret]:
        return list(self._last)

    def get_detected_secrets(self) -> dict[str, object]:
        """Masked values and count from the most recent detection."""
        return {
            "secrets": [secret.masked_value for secret in self._last],
            "count": len(self._last),
        }

    def get_secrets_by_severity(self) -> dict[str, list[str]]:
        """Findings of the most recent detection grouped by severity tag."""
        return group_by_severity([secret.format() for secret in self._last])

    def clear_cache(self) -> None:
        self._cache.clear()
