"""
Database security rules: query construction, credentials, transport
encryption, server configuration, auditing and NoSQL/Redis specifics.
"""

from guardian.analysis.rule_set import CategorizedRule, RuleSetAnalyzer, categorized_rule
from guardian.core.findings import RuleSetReport, Severity

_rule = categorized_rule

DATABASE_RULES: tuple[CategorizedRule, ...] = (
    # SQL injection
    _rule(
        r"(?:SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER).*\+.*(?:req\.|request\.|input|param|user|query|body)",
        "Critical: SQL injection vulnerability - String concatenation in SQL query",
        Severity.CRITICAL,
        "SQL Injection",
        "CWE-89",
        "Dynamic Query Construction",
    ),
    _rule(
        r"""query\s*\(\s*['"`][^'"`]*['"`]\s*\+""",
        "Critical: SQL injection - Dynamic query construction with concatenation",
        Severity.CRITICAL,
        "SQL Injection",
        "CWE-89",
        "Query Concatenation",
    ),
    _rule(
        r"""execute\s*\(\s*['"`][^'"`]*['"`]\s*\+""",
        "Critical: SQL injection - Dynamic execute statement",
        Severity.CRITICAL,
        "SQL Injection",
        "CWE-89",
        "Execute Concatenation",
    ),
    _rule(
        r"\$\{.*\}.*(?:SELECT|INSERT|UPDATE|DELETE)",
        "High: Potential SQL injection - Template literal in SQL query",
        Severity.HIGH,
        "SQL Injection",
        "CWE-89",
        "Template Injection",
    ),
    _rule(
        r"""format\s*\(\s*['"`].*(?:SELECT|INSERT|UPDATE|DELETE).*['"`]""",
        "High: SQL injection risk - String formatting in SQL query",
        Severity.HIGH,
        "SQL Injection",
        "CWE-89",
        "String Formatting",
    ),
    # Authentication and access control
    _rule(
        r"""password\s*=\s*['"`]['"`]""",
        "Critical: Empty database password detected",
        Severity.CRITICAL,
        "Authentication",
        "CWE-521",
        "Empty Password",
    ),
    _rule(
        r"""password\s*=\s*['"`](?:password|123456|admin|root|test)['"`]""",
        "Critical: Weak default database password detected",
        Severity.CRITICAL,
        "Authentication",
        "CWE-521",
        "Weak Password",
    ),
    _rule(
        r"""user\s*=\s*['"`](?:root|admin|sa)['"`]""",
        "High: Using privileged database user account",
        Severity.HIGH,
        "Access Control",
        "CWE-250",
        "Privileged Account",
    ),
    _rule(
        r"GRANT\s+ALL\s+PRIVILEGES",
        "High: Granting all privileges - follow principle of least privilege",
        Severity.HIGH,
        "Access Control",
        "CWE-250",
        "Excessive Privileges",
    ),
    _rule(
        r"GRANT.*TO.*@'%'",
        "High: Granting permissions to any host (%) - restrict to specific hosts",
        Severity.HIGH,
        "Access Control",
        "CWE-284",
        "Overly Permissive Access",
    ),
    # Connection security
    _rule(
        r"sslmode\s*=\s*disable",
        "High: SSL/TLS disabled for database connection",
        Severity.HIGH,
        "Encryption",
        "CWE-319",
        "Unencrypted Connection",
    ),
    _rule(
        r"trust_server_certificate\s*=\s*true",
        "Medium: Database connection trusting server certificate without verification",
        Severity.MEDIUM,
        "Encryption",
        "CWE-295",
        "Certificate Validation Bypass",
    ),
    _rule(
        r"encrypt\s*=\s*false",
        "High: Database connection encryption disabled",
        Severity.HIGH,
        "Encryption",
        "CWE-319",
        "Unencrypted Connection",
    ),
    _rule(
        r"(?:mongodb|mysql|postgres)://[^:]*:[^@]*@[^/]*/[^?]*(?!\?.*ssl)",
        "Medium: Database connection string without SSL parameters",
        Severity.MEDIUM,
        "Encryption",
        "CWE-319",
        "Missing SSL Configuration",
    ),
    # Data at rest
    _rule(
        r"CREATE\s+TABLE.*(?!.*ENCRYPTED)",
        "Low: Table created without encryption - consider encrypting sensitive data",
        Severity.LOW,
        "Encryption",
        "CWE-311",
        "Unencrypted Storage",
    ),
    _rule(
        r"(?:password|ssn|credit_card|social_security).*VARCHAR.*(?!.*ENCRYPTED)",
        "High: Sensitive data stored without encryption",
        Severity.HIGH,
        "Encryption",
        "CWE-311",
        "Sensitive Data Exposure",
    ),
    # Server configuration
    _rule(
        r"skip-grant-tables",
        "Critical: MySQL running with skip-grant-tables (no authentication)",
        Severity.CRITICAL,
        "Configuration",
        "CWE-287",
        "Authentication Bypass",
    ),
    _rule(
        r"bind-address\s*=\s*0\.0\.0\.0",
        "Medium: Database bound to all interfaces - restrict to specific IPs",
        Severity.MEDIUM,
        "Configuration",
        "CWE-284",
        "Network Exposure",
    ),
    _rule(
        r"port\s*=\s*(?:3306|5432|1433|27017)",
        "Low: Using default database port - consider changing for security",
        Severity.LOW,
        "Configuration",
        "CWE-1188",
        "Default Configuration",
    ),
    # Stored procedures
    _rule(
        r"DEFINER\s*=\s*.*@.*\s+SQL\s+SECURITY\s+DEFINER",
        "Medium: Stored procedure with DEFINER rights - review security context",
        Severity.MEDIUM,
        "Access Control",
        "CWE-250",
        "Privilege Context",
    ),
    _rule(
        r"EXEC\s*\(\s*@",
        "High: Dynamic SQL execution in stored procedure - SQL injection risk",
        Severity.HIGH,
        "SQL Injection",
        "CWE-89",
        "Dynamic SQL",
    ),
    # Backups
    _rule(
        r"mysqldump.*--single-transaction.*(?!--master-data)",
        "Low: Backup without master data - may affect point-in-time recovery",
        Severity.LOW,
        "Backup Security",
        "CWE-404",
        "Incomplete Backup",
    ),
    _rule(
        r"pg_dump.*(?!--no-password)",
        "Medium: Database backup may prompt for password - use .pgpass or environment variables",
        Severity.MEDIUM,
        "Backup Security",
        "CWE-522",
        "Password Exposure",
    ),
    # Auditing
    _rule(
        r"log_statement\s*=\s*none",
        "Medium: Database statement logging disabled - enable for security auditing",
        Severity.MEDIUM,
        "Auditing",
        "CWE-778",
        "Insufficient Logging",
    ),
    _rule(
        r"general_log\s*=\s*OFF",
        "Low: General query log disabled - consider enabling for auditing",
        Severity.LOW,
        "Auditing",
        "CWE-778",
        "Logging Disabled",
    ),
    # MongoDB
    _rule(
        r"db\.eval\s*\(",
        "High: MongoDB eval() function - potential code injection",
        Severity.HIGH,
        "NoSQL Injection",
        "CWE-94",
        "Code Injection",
    ),
    _rule(
        r"\$where.*\+",
        "High: MongoDB $where operator with concatenation - injection risk",
        Severity.HIGH,
        "NoSQL Injection",
        "CWE-94",
        "Where Injection",
    ),
    _rule(
        r"authorization:\s*disabled",
        "Critical: MongoDB authorization disabled",
        Severity.CRITICAL,
        "Authentication",
        "CWE-287",
        "Authorization Disabled",
    ),
    # Redis
    _rule(
        r"""requirepass\s*['"`]['"`]""",
        "Critical: Redis password is empty",
        Severity.CRITICAL,
        "Authentication",
        "CWE-521",
        "Empty Password",
    ),
    _rule(
        r"protected-mode\s*no",
        "High: Redis protected mode disabled",
        Severity.HIGH,
        "Configuration",
        "CWE-284",
        "Protection Disabled",
    ),
)


def _mentions(rule: CategorizedRule, *names: str) -> bool:
    return any(name in rule.message for name in names)


class DatabaseAnalyzer(RuleSetAnalyzer):
    """
    Flags insecure database code and server configuration.

    The context names the database engine. MySQL and PostgreSQL drop the
    NoSQL rules and the rules specific to other engines; MongoDB keeps the
    NoSQL, authentication, access control and encryption rules; Redis keeps
    the Redis, authentication and configuration rules. Any other engine runs
    the whole table.
    """

    name = "database"
    buckets = (
        "sql_injection",
        "configuration",
        "access_control",
        "encryption",
        "auditing",
    )
    category_buckets = {
        "SQL Injection": "sql_injection",
        "NoSQL Injection": "sql_injection",
        "Configuration": "configuration",
        "Backup Security": "configuration",
        "Access Control": "access_control",
        "Authentication": "access_control",
        "Encryption": "encryption",
        "Auditing": "auditing",
    }
    default_bucket = "configuration"

    def __init__(self, cache_size: int = 100, rules: tuple[CategorizedRule, ...] = DATABASE_RULES):
        super().__init__(rules, cache_size)

    def relevant_rules(self, context: str) -> tuple[CategorizedRule, ...]:
        db_type = context.lower()

        if "mysql" in db_type or "mariadb" in db_type:
            return tuple(
                r
                for r in self._rules
                if "NoSQL" not in r.category and not _mentions(r, "PostgreSQL", "MongoDB", "Redis")
            )

        if "postgres" in db_type:
            return tuple(
                r
                for r in self._rules
                if "NoSQL" not in r.category and not _mentions(r, "MySQL", "MongoDB", "Redis")
            )

        if "mongo" in db_type:
            kept = ("NoSQL", "Authentication", "Encryption", "Access Control")
            return tuple(
                r
                for r in self._rules
                if any(c in r.category for c in kept) or _mentions(r, "MongoDB")
            )

        if "redis" in db_type:
            return tuple(
                r
                for r in self._rules
                if _mentions(r, "Redis") or r.category in ("Authentication", "Configuration")
            )

        return self._rules

    def analyze_mysql(self, code: str) -> RuleSetReport:
        return self.analyze(code, "mysql")

    def analyze_postgresql(self, code: str) -> RuleSetReport:
        return self.analyze(code, "postgresql")

    def analyze_mongodb(self, code: str) -> RuleSetReport:
        return self.analyze(code, "mongodb")

    def analyze_redis(self, code: str) -> RuleSetReport:
        return self.analyze(code, "redis")

    def analyze_sqlserver(self, code: str) -> RuleSetReport:
        return self.analyze(code, "sqlserver")

