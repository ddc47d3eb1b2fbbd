"""
Rule framework for the analysis core.

This module provides the base class for token rules and the registry the
host driver uses to discover them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Type, Set, FrozenSet

from sqlinterp.core.findings import (
    Finding, Severity, Confidence, FindingCategory, CodeLocation, Remediation
)
from sqlinterp.core.tokens import Document, Token, TokenKind


@dataclass
class RuleMetadata:
    """Metadata for a rule."""
    rule_id: str
    name: str
    description: str
    severity: Severity
    confidence: Confidence
    category: FindingCategory
    applies_to: FrozenSet[TokenKind]
    tags: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    cwe_id: Optional[str] = None
    owasp_id: Optional[str] = None
    enabled_by_default: bool = True


class Rule(ABC):
    """
    Base class for token rules.

    The host calls `violates` once for every token whose kind the rule
    applies to, passing the document the token belongs to.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @property
    @abstractmethod
    def metadata(self) -> RuleMetadata:
        """Return rule metadata."""
        pass

    @abstractmethod
    def violates(self, token: Token, document: Document) -> Optional[Finding]:
        """
        Check a token for a violation.

        Args:
            token: The token to check.
            document: The document containing the token.

        Returns:
            A Finding, or None if the token is fine.
        """
        pass

    def get_remediation(self) -> Optional[Remediation]:
        """
        Get remediation information for this rule's findings.

        Override this method to provide fix suggestions.
        """
        return None

    def applies_to_token(self, token: Token) -> bool:
        return token.kind in self.metadata.applies_to

    @property
    def severity(self) -> Severity:
        """The rule's severity, after configuration overrides."""
        override = self.config.get("severity_overrides", {}).get(self.metadata.rule_id)
        if override:
            return Severity(override.lower())
        return self.metadata.severity

    def create_finding(
        self,
        token: Token,
        document: Document,
        explanation: str,
        variables: Optional[List[str]] = None,
        end_line: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Finding:
        """
        Create a finding anchored at a token, using the rule's metadata as defaults.
        """
        location = CodeLocation(
            file_path=document.path,
            start_line=token.line,
            end_line=end_line or token.line,
        )

        return Finding(
            rule_id=self.metadata.rule_id,
            description=self.metadata.description,
            explanation=explanation,
            severity=self.severity,
            confidence=self.metadata.confidence,
            category=self.metadata.category,
            location=location,
            variables=list(variables or []),
            snippet=document.get_snippet(token.line),
            remediation=self.get_remediation(),
            tags=list(self.metadata.tags),
            metadata=metadata or {},
            anchor=token,
        )


class RuleRegistry:
    """
    Registry for managing and discovering rules.

    Rules are registered by id. Rules that are not enabled by default stay
    off unless an engine's configuration enables them.
    """

    _instance: Optional["RuleRegistry"] = None

    def __init__(self):
        self._rules: Dict[str, Type[Rule]] = {}
        self._instances: Dict[str, Rule] = {}
        self._disabled_rules: Set[str] = set()

    @classmethod
    def get_instance(cls) -> "RuleRegistry":
        """Get the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, rule_class: Type[Rule]) -> Type[Rule]:
        """
        Register a rule class.

        Can be used as a decorator:

        @registry.register
        class MyRule(Rule):
            ...
        """
        metadata = rule_class(None).metadata
        self._rules[metadata.rule_id] = rule_class
        if not metadata.enabled_by_default:
            self._disabled_rules.add(metadata.rule_id)
        return rule_class

    def get_rule(self, rule_id: str, config: Optional[Dict[str, Any]] = None) -> Optional[Rule]:
        """Get a rule instance by ID."""
        if rule_id not in self._rules:
            return None

        cache_key = f"{rule_id}:{hash(str(config))}"
        if cache_key not in self._instances:
            self._instances[cache_key] = self._rules[rule_id](config)

        return self._instances[cache_key]

    def get_all_rules(self, config: Optional[Dict[str, Any]] = None) -> List[Rule]:
        """Get all registered rules."""
        return [
            self.get_rule(rule_id, config)
            for rule_id in self._rules
        ]

    def is_rule_enabled(self, rule_id: str) -> bool:
        return rule_id in self._rules and rule_id not in self._disabled_rules


# Global registry instance
registry = RuleRegistry.get_instance()


def rule(cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule with the global registry.

    Usage:
        @rule
        class MyRule(Rule):
            ...
    """
    return registry.register(cls)
