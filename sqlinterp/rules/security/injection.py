"""
SQL injection detection in interpolated and concatenated strings.

When SQL statements are built by hand instead of through an ORM, any input
must be quoted or passed through placeholders. This rule looks for strings
that look like SQL statements and reports the variables that get
interpolated or concatenated into them:

    my $sql = "SELECT * FROM $table WHERE field = $value";
    my $sql = 'SELECT * FROM ' . $table;

and leaves alone strings that are not SQL:

    my $string = "Hello $world";

Variables that are known to be safe, for example because they went through
$dbh->quote(), can be whitelisted on the line of the statement:

    my $sql = "SELECT * FROM t WHERE id = $id"; ## SQL safe ($id)
"""

import logging
from typing import Optional

from sqlinterp.analysis.literals import effective_line
from sqlinterp.analysis.scanner import scan_statement
from sqlinterp.core.findings import (
    Confidence, Finding, FindingCategory, Remediation, Severity,
)
from sqlinterp.core.rules import Rule, RuleMetadata, rule
from sqlinterp.core.tokens import LITERAL_KINDS, Document, Token

logger = logging.getLogger(__name__)


DESCRIPTION = "SQL injection risk."
EXPLANATION = "Variables in interpolated SQL string are susceptible to SQL injection: %s"


@rule
class PreventSQLInjectionRule(Rule):
    """
    Detects variables interpolated or concatenated into SQL statements.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="PreventSQLInjection",
            name="Prevent SQL Injection",
            description=DESCRIPTION,
            severity=Severity.CRITICAL,
            confidence=Confidence.MEDIUM,
            category=FindingCategory.INJECTION,
            applies_to=LITERAL_KINDS,
            tags=["security", "injection", "sql"],
            references=[
                "https://owasp.org/www-community/attacks/SQL_Injection",
                "https://cheatsheetseries.owasp.org/cheatsheets/Query_Parameterization_Cheat_Sheet.html",
            ],
            cwe_id="CWE-89",
            owasp_id="A03:2021",
        )

    def violates(self, token: Token, document: Document) -> Optional[Finding]:
        """Check a literal token for SQL injection risks."""
        outcome = scan_statement(token, document.safe_variables)

        if not outcome.ok:
            logger.warning(
                "Skipping statement at %s:%d: %s",
                document.path, token.line, outcome.error,
            )
            return None

        if not outcome.is_risky:
            return None

        return self.create_finding(
            token,
            document,
            explanation=EXPLANATION % ", ".join(outcome.variables),
            variables=outcome.variables,
            end_line=effective_line(token),
        )

    def get_remediation(self) -> Remediation:
        return Remediation(
            description=(
                "Pass values to the database through placeholders instead of "
                "interpolating them. If a variable was already quoted with "
                "$dbh->quote(), mark it with '## SQL safe ($var)' rather than "
                "disabling the rule for the whole statement."
            ),
            before_code='my $sql = "SELECT * FROM users WHERE id = $id";',
            after_code='my $sth = $dbh->prepare("SELECT * FROM users WHERE id = ?");\n$sth->execute($id);',
            references=list(self.metadata.references),
            cwe_id="CWE-89",
        )
