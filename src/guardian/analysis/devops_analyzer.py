"""
Infrastructure rules for Dockerfiles, Kubernetes manifests, Terraform and
CI/CD pipeline scripts.
"""

from guardian.analysis.rule_set import CategorizedRule, RuleSetAnalyzer, categorized_rule
from guardian.core.findings import RuleSetReport, Severity

_rule = categorized_rule

CONTAINER = "Container Security"
KUBERNETES = "Kubernetes Security"
INFRASTRUCTURE = "Infrastructure Security"
DATA_PROTECTION = "Data Protection"
CICD = "CI/CD Security"

DEVOPS_RULES: tuple[CategorizedRule, ...] = (
    # Docker
    _rule(
        r"FROM\s+.*:latest",
        "Avoid using :latest tag in production - use specific version tags",
        Severity.MEDIUM,
        CONTAINER,
        "CWE-1188",
        "Docker Tag Issue",
    ),
    _rule(
        r"USER\s+root",
        "Running container as root user poses security risks",
        Severity.HIGH,
        CONTAINER,
        "CWE-250",
        "Privilege Escalation",
    ),
    _rule(
        r"COPY\s+\.\s+\.",
        "Copying entire context may include sensitive files - use .dockerignore",
        Severity.LOW,
        CONTAINER,
        "CWE-200",
        "Information Disclosure",
    ),
    _rule(
        r"EXPOSE\s+22",
        "Exposing SSH port (22) in container is generally not recommended",
        Severity.MEDIUM,
        CONTAINER,
        "CWE-200",
        "Unnecessary Service Exposure",
    ),
    _rule(
        r"ADD\s+http",
        "Using ADD with URLs can be insecure - prefer COPY with explicit downloads",
        Severity.MEDIUM,
        CONTAINER,
        "CWE-494",
        "Insecure Download",
    ),
    # Kubernetes
    _rule(
        r"privileged:\s*true",
        "Running privileged containers breaks container isolation",
        Severity.CRITICAL,
        KUBERNETES,
        "CWE-250",
        "Privilege Escalation",
    ),
    _rule(
        r"hostNetwork:\s*true",
        "Using host network bypasses network isolation",
        Severity.HIGH,
        KUBERNETES,
        "CWE-250",
        "Network Isolation Bypass",
    ),
    _rule(
        r"hostPID:\s*true",
        "Using host PID namespace breaks process isolation",
        Severity.HIGH,
        KUBERNETES,
        "CWE-250",
        "Process Isolation Bypass",
    ),
    _rule(
        r"runAsUser:\s*0",
        "Running as root user (UID 0) in Kubernetes pod",
        Severity.HIGH,
        KUBERNETES,
        "CWE-250",
        "Root User",
    ),
    _rule(
        r"allowPrivilegeEscalation:\s*true",
        "Allowing privilege escalation can lead to container breakout",
        Severity.HIGH,
        KUBERNETES,
        "CWE-250",
        "Privilege Escalation",
    ),
    _rule(
        r"kubectl\s+.*--insecure-skip-tls-verify",
        "Skipping TLS verification exposes to man-in-the-middle attacks",
        Severity.HIGH,
        KUBERNETES,
        "CWE-295",
        "TLS Bypass",
    ),
    # Terraform
    _rule(
        r'ingress\s*=\s*\[\s*"0\.0\.0\.0/0"\s*\]',
        "Security group allows access from anywhere (0.0.0.0/0)",
        Severity.HIGH,
        INFRASTRUCTURE,
        "CWE-284",
        "Overly Permissive Access",
    ),
    _rule(
        r'cidr_blocks\s*=\s*\[\s*"0\.0\.0\.0/0"\s*\]',
        "CIDR block allows access from anywhere - consider restricting",
        Severity.MEDIUM,
        INFRASTRUCTURE,
        "CWE-284",
        "Network Access Control",
    ),
    _rule(
        r"publicly_accessible\s*=\s*true",
        "Database is publicly accessible - ensure this is intentional",
        Severity.HIGH,
        "Database Security",
        "CWE-284",
        "Public Database Access",
    ),
    _rule(
        r"skip_final_snapshot\s*=\s*true",
        "Skipping final snapshot may lead to data loss",
        Severity.MEDIUM,
        DATA_PROTECTION,
        "CWE-404",
        "Data Loss Risk",
    ),
    _rule(
        r"encrypted\s*=\s*false",
        "Encryption disabled - data stored in plaintext",
        Severity.HIGH,
        DATA_PROTECTION,
        "CWE-311",
        "Unencrypted Data",
    ),
    # CI/CD
    _rule(
        r"docker\s+run\s+.*--privileged",
        "Running Docker with --privileged flag in CI/CD pipeline",
        Severity.HIGH,
        CICD,
        "CWE-250",
        "Privileged Container",
    ),
    _rule(
        r"curl\s+.*\|\s*bash",
        "Piping curl output to bash is dangerous - verify scripts first",
        Severity.HIGH,
        CICD,
        "CWE-494",
        "Remote Code Execution",
    ),
    _rule(
        r"wget\s+.*\|\s*sh",
        "Piping wget output to shell is dangerous - verify scripts first",
        Severity.HIGH,
        CICD,
        "CWE-494",
        "Remote Code Execution",
    ),
    _rule(
        r"sudo\s+.*without.*password",
        "Passwordless sudo in CI/CD can be exploited",
        Severity.MEDIUM,
        CICD,
        "CWE-250",
        "Privilege Escalation",
    ),
    # Cloud defaults
    _rule(
        r"default_security_group",
        "Using default security group - create custom security groups",
        Severity.MEDIUM,
        INFRASTRUCTURE,
        "CWE-284",
        "Default Configuration",
    ),
    _rule(
        r"versioning\s*=\s*false",
        "S3 versioning disabled - enable for data protection",
        Severity.MEDIUM,
        DATA_PROTECTION,
        "CWE-404",
        "Version Control",
    ),
    _rule(
        r"mfa_delete\s*=\s*false",
        "MFA delete disabled - enable for critical S3 buckets",
        Severity.MEDIUM,
        DATA_PROTECTION,
        "CWE-287",
        "Multi-Factor Authentication",
    ),
)

_KUBERNETES_HINTS = ("kubernetes", "k8s", "yaml", "yml")
_CICD_HINTS = ("jenkins", "github", "gitlab", "ci")


def _is_terraform(file_type: str) -> bool:
    return "terraform" in file_type or "tf" in file_type


class DevOpsAnalyzer(RuleSetAnalyzer):
    """
    Flags risky container, cluster, cloud and pipeline configuration.

    The context is a file type hint. ``dockerfile`` runs the container
    rules; Kubernetes manifests (``kubernetes``, ``k8s``, ``yaml``, ``yml``)
    add the cluster rules; ``terraform`` runs the infrastructure and data
    protection rules; pipeline hints (``jenkins``, ``github``, ``gitlab``,
    ``ci``) run the CI/CD rules. Infrastructure findings are filed under
    ``terraform`` for Terraform contexts and ``infrastructure`` otherwise.
    """

    name = "DevOps"
    buckets = ("infrastructure", "cicd", "container", "kubernetes", "terraform")
    category_buckets = {
        CONTAINER: "container",
        KUBERNETES: "kubernetes",
        INFRASTRUCTURE: "infrastructure",
        DATA_PROTECTION: "infrastructure",
        CICD: "cicd",
    }
    default_bucket = "infrastructure"

    def __init__(self, cache_size: int = 100, rules: tuple[CategorizedRule, ...] = DEVOPS_RULES):
        super().__init__(rules, cache_size)

    def _with_categories(self, *categories: str) -> tuple[CategorizedRule, ...]:
        return tuple(r for r in self._rules if r.category in categories)

    def relevant_rules(self, context: str) -> tuple[CategorizedRule, ...]:
        file_type = context.lower()

        if "dockerfile" in file_type:
            return self._with_categories(CONTAINER)
        if any(hint in file_type for hint in _KUBERNETES_HINTS):
            return self._with_categories(KUBERNETES, CONTAINER)
        if "terraform" in file_type or ".tf" in file_type:
            return self._with_categories(INFRASTRUCTURE, DATA_PROTECTION)
        if any(hint in file_type for hint in _CICD_HINTS):
            return self._with_categories(CICD)
        return self._rules

    def bucket_for(self, rule: CategorizedRule, context: str) -> str:
        bucket = super().bucket_for(rule, context)
        if bucket == "infrastructure" and rule.category in (INFRASTRUCTURE, DATA_PROTECTION):
            if _is_terraform(context.lower()):
                return "terraform"
        return bucket

    def analyze_dockerfile(self, code: str) -> RuleSetReport:
        return self.analyze(code, "dockerfile")

    def analyze_kubernetes_manifest(self, code: str) -> RuleSetReport:
        return self.analyze(code, "kubernetes")

    def analyze_terraform(self, code: str) -> RuleSetReport:
        return self.analyze(code, "terraform")

    def analyze_cicd(self, code: str) -> RuleSetReport:
        return self.analyze(code, "cicd")
