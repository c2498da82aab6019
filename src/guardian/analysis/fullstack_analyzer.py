"""
Web application rules spanning browser code, Node/Express backends, APIs,
authentication, sessions, input validation, uploads, WebSockets and GraphQL.
"""

from guardian.analysis.rule_set import CategorizedRule, RuleSetAnalyzer, categorized_rule
from guardian.core.findings import RuleSetReport, Severity

_rule = categorized_rule

FULLSTACK_RULES: tuple[CategorizedRule, ...] = (
    # Frontend
    _rule(
        r"dangerouslySetInnerHTML.*\{.*__html:",
        "Critical: XSS vulnerability - dangerouslySetInnerHTML without sanitization",
        Severity.CRITICAL,
        "Frontend Security",
        "CWE-79",
        "Cross-Site Scripting",
    ),
    _rule(
        r"innerHTML\s*=.*(?:props\.|state\.|user|input)",
        "High: XSS risk - innerHTML with dynamic content",
        Severity.HIGH,
        "Frontend Security",
        "CWE-79",
        "DOM Manipulation",
    ),
    _rule(
        r"document\.cookie\s*=.*(?:user|input|param)",
        "High: Cookie manipulation with user input",
        Severity.HIGH,
        "Frontend Security",
        "CWE-79",
        "Cookie Injection",
    ),
    _rule(
        r"localStorage\.setItem.*(?:token|password|secret|key)",
        "High: Sensitive data stored in localStorage (accessible via XSS)",
        Severity.HIGH,
        "Frontend Security",
        "CWE-922",
        "Insecure Storage",
    ),
    _rule(
        r"""window\.postMessage\s*\(\s*.*,\s*['"`]\*['"`]""",
        "High: postMessage with wildcard origin (*)",
        Severity.HIGH,
        "Frontend Security",
        "CWE-346",
        "Origin Validation",
    ),
    _rule(
        r"fetch\s*\(\s*.*\+.*(?:user|input|param)",
        "Medium: Dynamic URL construction in fetch request",
        Severity.MEDIUM,
        "Frontend Security",
        "CWE-918",
        "URL Manipulation",
    ),
    # Backend
    _rule(
        r"app\.use\s*\(\s*cors\s*\(\s*\)\s*\)",
        "Medium: CORS enabled without restrictions",
        Severity.MEDIUM,
        "Backend Security",
        "CWE-346",
        "CORS Misconfiguration",
    ),
    _rule(
        r"""cors\s*\(\s*\{\s*origin\s*:\s*['"`]\*['"`]""",
        "High: CORS allowing all origins (*)",
        Severity.HIGH,
        "Backend Security",
        "CWE-346",
        "CORS Wildcard",
    ),
    _rule(
        r"app\.use\s*\(\s*express\.static\s*\(.*\)\s*\)",
        "Medium: Static file serving without restrictions",
        Severity.MEDIUM,
        "Backend Security",
        "CWE-200",
        "File Exposure",
    ),
    _rule(
        r"""process\.env\.NODE_ENV\s*!==\s*['"`]production['"`].*console\.log""",
        "Low: Debug logging may leak sensitive information",
        Severity.LOW,
        "Backend Security",
        "CWE-532",
        "Information Disclosure",
    ),
    # API
    _rule(
        r"""app\.(?:get|post|put|delete)\s*\(\s*['"`][^'"`]*['"`]\s*,\s*(?!.*auth|.*middleware)""",
        "Medium: API endpoint without authentication middleware",
        Severity.MEDIUM,
        "API Security",
        "CWE-306",
        "Missing Authentication",
    ),
    _rule(
        r"res\.json\s*\(\s*.*password.*\)",
        "High: Password field in API response",
        Severity.HIGH,
        "API Security",
        "CWE-200",
        "Sensitive Data Exposure",
    ),
    _rule(
        r"""app\.use\s*\(\s*['"`]/api['"`].*(?!.*rate.*limit)""",
        "Medium: API without rate limiting",
        Severity.MEDIUM,
        "API Security",
        "CWE-770",
        "Missing Rate Limiting",
    ),
    _rule(
        r"req\.query\.\w+.*(?:exec|eval|system)",
        "Critical: Command injection via query parameters",
        Severity.CRITICAL,
        "API Security",
        "CWE-78",
        "Command Injection",
    ),
    # Authentication
    _rule(
        r"""jwt\.sign\s*\(\s*.*,\s*['"`]['"`]""",
        "Critical: JWT signed with empty secret",
        Severity.CRITICAL,
        "Authentication",
        "CWE-327",
        "Weak JWT Secret",
    ),
    _rule(
        r"""jwt\.sign\s*\(\s*.*,\s*['"`]secret['"`]""",
        "High: JWT signed with weak secret",
        Severity.HIGH,
        "Authentication",
        "CWE-327",
        "Weak JWT Secret",
    ),
    _rule(
        r"bcrypt\.compare\s*\(\s*.*,\s*.*\)\s*(?!\.then|\.catch|await)",
        "Medium: bcrypt.compare without proper async handling",
        Severity.MEDIUM,
        "Authentication",
        "CWE-287",
        "Authentication Logic",
    ),
    _rule(
        r"""passport\.authenticate\s*\(\s*['"`]local['"`]\s*,\s*\{\s*session\s*:\s*false""",
        "Low: Passport authentication without session",
        Severity.LOW,
        "Authentication",
        "CWE-287",
        "Session Management",
    ),
    # Sessions and cookies
    _rule(
        r"""session\s*\(\s*\{\s*secret\s*:\s*['"`](?:secret|default|key)['"`]""",
        "High: Weak session secret",
        Severity.HIGH,
        "Session Management",
        "CWE-327",
        "Weak Session Secret",
    ),
    _rule(
        r"session\s*\(\s*\{[^}]*secure\s*:\s*false",
        "Medium: Session cookies not marked as secure",
        Severity.MEDIUM,
        "Session Management",
        "CWE-614",
        "Insecure Cookie",
    ),
    _rule(
        r"session\s*\(\s*\{[^}]*httpOnly\s*:\s*false",
        "Medium: Session cookies accessible via JavaScript",
        Severity.MEDIUM,
        "Session Management",
        "CWE-1004",
        "Cookie Accessibility",
    ),
    _rule(
        r"res\.cookie\s*\(\s*.*,\s*.*,\s*\{[^}]*secure\s*:\s*false",
        "Medium: Cookie not marked as secure",
        Severity.MEDIUM,
        "Session Management",
        "CWE-614",
        "Insecure Cookie",
    ),
    # Input validation
    _rule(
        r"req\.body\.\w+.*(?!.*validate|.*sanitize|.*escape)",
        "Medium: Request body used without validation",
        Severity.MEDIUM,
        "Data Validation",
        "CWE-20",
        "Input Validation",
    ),
    _rule(
        r"req\.params\.\w+.*(?:query|exec|system)",
        "High: URL parameters used in dangerous operations",
        Severity.HIGH,
        "Data Validation",
        "CWE-20",
        "Parameter Injection",
    ),
    _rule(
        r"parseInt\s*\(\s*req\.",
        "Low: parseInt without radix parameter",
        Severity.LOW,
        "Data Validation",
        "CWE-20",
        "Number Parsing",
    ),
    _rule(
        r"JSON\.parse\s*\(\s*req\.",
        "Medium: JSON.parse without try-catch",
        Severity.MEDIUM,
        "Data Validation",
        "CWE-20",
        "JSON Parsing",
    ),
    # File uploads
    _rule(
        r"multer\s*\(\s*\{[^}]*(?!.*fileFilter)",
        "Medium: File upload without file type validation",
        Severity.MEDIUM,
        "File Upload",
        "CWE-434",
        "Unrestricted File Upload",
    ),
    _rule(
        r"req\.file\.path.*(?!.*sanitize|.*validate)",
        "High: File path used without validation",
        Severity.HIGH,
        "File Upload",
        "CWE-22",
        "Path Traversal",
    ),
    # Error handling
    _rule(
        r"catch\s*\(\s*\w+\s*\)\s*\{[^}]*res\.(?:send|json)\s*\(\s*\w+",
        "Medium: Error details exposed in response",
        Severity.MEDIUM,
        "Error Handling",
        "CWE-209",
        "Information Disclosure",
    ),
    _rule(
        r"""process\.on\s*\(\s*['"`]uncaughtException['"`]""",
        "Low: Uncaught exception handler - may mask security issues",
        Severity.LOW,
        "Error Handling",
        "CWE-248",
        "Exception Handling",
    ),
    # Framework templates
    _rule(
        r"""v-html\s*=\s*['"`]\{\{.*\}\}['"`]""",
        "High: Vue.js v-html with interpolation - XSS risk",
        Severity.HIGH,
        "Frontend Framework",
        "CWE-79",
        "Template Injection",
    ),
    _rule(
        r"""\[innerHTML\]\s*=\s*['"`].*\{\{.*\}\}.*['"`]""",
        "High: Angular innerHTML binding with interpolation",
        Severity.HIGH,
        "Frontend Framework",
        "CWE-79",
        "Template Injection",
    ),
    _rule(
        r"useEffect\s*\(\s*\(\s*\)\s*=>\s*\{[^}]*fetch\s*\(",
        "Low: useEffect with fetch - ensure proper cleanup",
        Severity.LOW,
        "Frontend Framework",
        "CWE-404",
        "Resource Management",
    ),
    # WebSockets
    _rule(
        r"""new\s+WebSocket\s*\(\s*['"`]ws:""",
        "Medium: Insecure WebSocket connection (ws:// instead of wss://)",
        Severity.MEDIUM,
        "WebSocket Security",
        "CWE-319",
        "Unencrypted Connection",
    ),
    _rule(
        r"""ws\.on\s*\(\s*['"`]message['"`].*(?!.*validate|.*sanitize)""",
        "Medium: WebSocket message handler without validation",
        Severity.MEDIUM,
        "WebSocket Security",
        "CWE-20",
        "Input Validation",
    ),
    # GraphQL
    _rule(
        r"graphql\s*\(\s*\{[^}]*introspection\s*:\s*true",
        "Medium: GraphQL introspection enabled in production",
        Severity.MEDIUM,
        "GraphQL Security",
        "CWE-200",
        "Information Disclosure",
    ),
    _rule(
        r"graphql\s*\(\s*\{[^}]*(?!.*depth.*limit)",
        "Medium: GraphQL without query depth limiting",
        Severity.MEDIUM,
        "GraphQL Security",
        "CWE-770",
        "Resource Exhaustion",
    ),
)


class FullStackAnalyzer(RuleSetAnalyzer):
    """Flags web application risks, narrowed by the framework in use."""

    name = "full-stack"
    buckets = (
        "frontend",
        "backend",
        "api",
        "authentication",
        "data_validation",
        "session_management",
    )
    category_buckets = {
        "Frontend Security": "frontend",
        "Frontend Framework": "frontend",
        "WebSocket Security": "frontend",
        "Backend Security": "backend",
        "Error Handling": "backend",
        "API Security": "api",
        "GraphQL Security": "api",
        "Authentication": "authentication",
        "Data Validation": "data_validation",
        "File Upload": "data_validation",
        "Session Management": "session_management",
    }
    default_bucket = "backend"

    def __init__(self, cache_size: int = 100, rules: tuple[CategorizedRule, ...] = FULLSTACK_RULES):
        super().__init__(rules, cache_size)

    def _matching(self, categories: tuple[str, ...], markers: tuple[str, ...] = ()) -> tuple[CategorizedRule, ...]:
        return tuple(
            r
            for r in self._rules
            if any(c in r.category for c in categories) or any(m in r.message for m in markers)
        )

    def relevant_rules(self, context: str) -> tuple[CategorizedRule, ...]:
        framework = context.lower()

        if any(hint in framework for hint in ("react", "jsx", "tsx")):
            return self._matching(
                ("Frontend", "API", "Authentication"), ("React", "dangerouslySetInnerHTML")
            )
        if "vue" in framework:
            return self._matching(("Frontend", "API"), ("Vue", "v-html"))
        if "angular" in framework:
            return self._matching(("Frontend", "API"), ("Angular", "innerHTML"))
        if any(hint in framework for hint in ("express", "node", "backend")):
            return self._matching(
                ("Backend", "API", "Authentication", "Session", "Data Validation")
            )
        return self._rules

    def analyze_react(self, code: str) -> RuleSetReport:
        return self.analyze(code, "react")

    def analyze_vue(self, code: str) -> RuleSetReport:
        return self.analyze(code, "vue")

    def analyze_angular(self, code: str) -> RuleSetReport:
        return self.analyze(code, "angular")

    def analyze_express(self, code: str) -> RuleSetReport:
        return self.analyze(code, "express")

    def analyze_graphql(self, code: str) -> RuleSetReport:
        return self.analyze(code, "graphql")
