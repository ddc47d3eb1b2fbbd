"""
Host driver for the rules.

The engine dispatches every token of a document to the rules that apply to
it, collects the findings, and isolates failures so that an error on one
token never stops the analysis of the rest of the document.
"""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Dict, Any, Iterable, Optional, Set

from sqlinterp.core.findings import Finding, ScanResult, Severity
from sqlinterp.core.rules import Rule, RuleRegistry, registry
from sqlinterp.core.tokens import Document

# Import rules to register them with the registry
import sqlinterp.rules  # noqa: F401

logger = logging.getLogger(__name__)


# A comment starting with "## no critic" disables every rule on its line,
# "## no critic (A B)" only the named ones.
NO_CRITIC_PATTERN = re.compile(r"\A\s*##\s*no\s+critic\b(?:\s*\(([^)]*)\))?", re.IGNORECASE)


def suppressed_rules_by_line(document: Document) -> Dict[int, Optional[Set[str]]]:
    """
    Map line numbers to the rule names suppressed on them.

    A value of None means every rule is suppressed on that line.
    """
    suppressions: Dict[int, Optional[Set[str]]] = {}

    for comment in document.comments():
        match = NO_CRITIC_PATTERN.search(comment.content)
        if match is None:
            continue
        if match.group(1) is None:
            suppressions[comment.line] = None
        elif comment.line not in suppressions or suppressions[comment.line] is not None:
            names = {name for name in re.split(r"[\s,]+", match.group(1)) if name}
            suppressions.setdefault(comment.line, set()).update(names)

    return suppressions


class ScanEngine:
    """
    Runs the registered rules over host-supplied documents.

    The engine:
    1. Selects the enabled rules
    2. Hands each token to every rule that applies to its kind
    3. Marks findings suppressed by "## no critic" comments
    4. Filters findings by severity threshold
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.registry: RuleRegistry = registry
        self.errors: List[str] = []

        self.max_workers = self.config.get("max_workers", 4)
        self.severity_threshold = Severity(self.config.get("severity_threshold", "info"))
        self.rule_config = self.config.get("rules", {})

        self.enabled_rule_ids: Set[str] = set(self.rule_config.get("enabled", []))
        self.disabled_rule_ids: Set[str] = set(self.rule_config.get("disabled", []))

    def get_rules(self) -> List[Rule]:
        """Return the rules this engine runs, without changing the shared registry."""
        rules = []

        for rule in self.registry.get_all_rules(self.rule_config):
            rule_id = rule.metadata.rule_id
            if rule_id in self.disabled_rule_ids:
                continue
            if rule_id not in self.enabled_rule_ids and not self.registry.is_rule_enabled(rule_id):
                continue
            rules.append(rule)

        return rules

    def scan_document(self, document: Document) -> List[Finding]:
        """Scan a single document and return its findings."""
        findings: List[Finding] = []
        rules = self.get_rules()
        suppressions = suppressed_rules_by_line(document)

        for token in document.tokens:
            for rule in rules:
                if not rule.applies_to_token(token):
                    continue

                try:
                    finding = rule.violates(token, document)
                except Exception as e:
                    logger.exception(
                        "Rule %s failed on %s:%d",
                        rule.metadata.rule_id, document.path, token.line,
                    )
                    self.errors.append(
                        f"Error running rule {rule.metadata.rule_id} on {document.path}:{token.line}: {str(e)}"
                    )
                    continue

                if finding is None:
                    continue

                if token.line in suppressions:
                    names = suppressions[token.line]
                    if names is None or rule.metadata.rule_id in names:
                        finding.suppressed = True
                        finding.suppression_reason = "Inline suppression comment"

                if finding.severity >= self.severity_threshold:
                    findings.append(finding)

        logger.debug("Found %d finding(s) in %s", len(findings), document.path)
        return findings

    def scan_documents(self, documents: Iterable[Document]) -> ScanResult:
        """
        Scan a batch of documents and return results.

        Documents are independent of each other and are scanned in
        parallel when more than one worker is configured.
        """
        start_time = time.time()
        all_findings: List[Finding] = []
        rules_applied: Set[str] = set()
        documents_scanned = 0

        documents = list(documents)

        if len(documents) > 1 and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {executor.submit(self.scan_document, d): d for d in documents}

                for future in as_completed(futures):
                    document = futures[future]
                    try:
                        all_findings.extend(future.result())
                        documents_scanned += 1
                    except Exception as e:
                        logger.exception("Error scanning %s", document.path)
                        self.errors.append(f"Error scanning {document.path}: {str(e)}")
        else:
            for document in documents:
                try:
                    all_findings.extend(self.scan_document(document))
                    documents_scanned += 1
                except Exception as e:
                    logger.exception("Error scanning %s", document.path)
                    self.errors.append(f"Error scanning {document.path}: {str(e)}")

        for finding in all_findings:
            rules_applied.add(finding.rule_id)

        # Critical first, then by position
        all_findings.sort(key=lambda f: (f.location.file_path, f.location.start_line))
        all_findings.sort(key=lambda f: f.severity, reverse=True)

        elapsed_time = time.time() - start_time

        return ScanResult(
            findings=all_findings,
            documents_scanned=documents_scanned,
            scan_time_seconds=round(elapsed_time, 3),
            rules_applied=sorted(rules_applied),
            errors=self.errors,
        )


def create_engine(config_path: Optional[str] = None, **kwargs) -> ScanEngine:
    """
    Create a scan engine with configuration.

    Args:
        config_path: Optional path to a configuration file.
        **kwargs: Additional configuration options.

    Returns:
        Configured ScanEngine instance.
    """
    config: Dict[str, Any] = {}

    if config_path:
        from sqlinterp.config import configure_logging, load_scan_config
        scan_config = load_scan_config(config_path)
        configure_logging(scan_config.log_level)
        config = scan_config.to_engine_config()

    config.update(kwargs)

    return ScanEngine(config)
