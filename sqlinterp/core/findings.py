"""
Finding data structures for the SQL injection rule.

A finding is the diagnostic handed to the host's reporting sink: one per
flagged statement, anchored at the literal that started the statement.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
import json


class Severity(Enum):
    """Severity levels for findings."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    def __lt__(self, other):
        order = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
        return order.index(self) < order.index(other)

    def __le__(self, other):
        return self == other or self < other


class Confidence(Enum):
    """Confidence levels for findings."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FindingCategory(Enum):
    """Categories of findings."""
    INJECTION = "injection"


@dataclass
class CodeLocation:
    """Represents a location in source code."""
    file_path: str
    start_line: int
    end_line: int

    def __str__(self) -> str:
        return f"{self.file_path}:{self.start_line}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


@dataclass
class CodeSnippet:
    """A snippet of code with context."""
    code: str
    highlighted_line: int
    context_before: List[str] = field(default_factory=list)
    context_after: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "highlighted_line": self.highlighted_line,
            "context_before": self.context_before,
            "context_after": self.context_after,
        }


@dataclass
class Remediation:
    """Remediation information for a finding."""
    description: str
    before_code: Optional[str] = None
    after_code: Optional[str] = None
    references: List[str] = field(default_factory=list)
    cwe_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "before_code": self.before_code,
            "after_code": self.after_code,
            "references": self.references,
            "cwe_id": self.cwe_id,
        }


@dataclass
class Finding:
    """
    Represents one flagged statement.

    `description` is the rule's fixed one-line description, `explanation`
    names the offending variables. `anchor` points back at the token that
    started the statement and is not serialized.
    """
    rule_id: str
    description: str
    explanation: str
    severity: Severity
    confidence: Confidence
    category: FindingCategory
    location: CodeLocation
    variables: List[str] = field(default_factory=list)
    snippet: Optional[CodeSnippet] = None
    remediation: Optional[Remediation] = None
    tags: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    anchor: Optional[Any] = field(default=None, repr=False, compare=False)
    suppressed: bool = False
    suppression_reason: Optional[str] = None

    def __post_init__(self):
        """Validate and normalize the finding."""
        if isinstance(self.severity, str):
            self.severity = Severity(self.severity)
        if isinstance(self.confidence, str):
            self.confidence = Confidence(self.confidence)
        if isinstance(self.category, str):
            self.category = FindingCategory(self.category)

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to a dictionary."""
        result = {
            "rule_id": self.rule_id,
            "description": self.description,
            "explanation": self.explanation,
            "severity": self.severity.value,
            "confidence": self.confidence.value,
            "category": self.category.value,
            "location": self.location.to_dict(),
            "variables": self.variables,
            "tags": self.tags,
            "metadata": self.metadata,
            "suppressed": self.suppressed,
        }

        if self.snippet:
            result["snippet"] = self.snippet.to_dict()
        if self.remediation:
            result["remediation"] = self.remediation.to_dict()
        if self.suppression_reason:
            result["suppression_reason"] = self.suppression_reason

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert finding to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


@dataclass
class ScanResult:
    """Results from scanning a batch of documents."""
    findings: List[Finding]
    documents_scanned: int
    scan_time_seconds: float
    rules_applied: List[str]
    errors: List[str] = field(default_factory=list)

    @property
    def critical_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.CRITICAL and not f.suppressed)

    @property
    def high_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.HIGH and not f.suppressed)

    @property
    def total_findings(self) -> int:
        return sum(1 for f in self.findings if not f.suppressed)

    @property
    def suppressed_count(self) -> int:
        return sum(1 for f in self.findings if f.suppressed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "documents_scanned": self.documents_scanned,
                "scan_time_seconds": self.scan_time_seconds,
                "rules_applied": self.rules_applied,
                "total_findings": self.total_findings,
                "critical_findings": self.critical_count,
                "high_findings": self.high_count,
                "suppressed_findings": self.suppressed_count,
            },
            "findings": [f.to_dict() for f in self.findings],
            "errors": self.errors,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
