"""
Log augmentation - normalizes a freshly parsed SARIF log for display.

The panel never reads raw SARIF fields directly when a normalized value
exists.  ``augment_log`` fills the non-SARIF fields of every result
(identity, resolved rule, effective level and baseline, message text,
primary location, suppression state) exactly once, right after ingestion.

Hosts with their own normalization can pass a different callable with the
``Augmenter`` signature to ``LogStore``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable, Dict, Iterable, Optional, Tuple
from urllib.parse import quote, urljoin

from .schemas.sarif import (
    ArtifactLocation,
    Log,
    ReportingDescriptor,
    Result,
    ResultId,
    Run,
)

logger = logging.getLogger(__name__)

Augmenter = Callable[[Log, Dict[str, ReportingDescriptor], Optional[str]], None]

DEFAULT_LEVEL = "warning"
DEFAULT_BASELINE = "new"
SUPPRESSED = "suppressed"
NOT_SUPPRESSED = "not suppressed"

_PLACEHOLDER = re.compile(r"\{(\d+)\}")
_MAX_BASE_DEPTH = 8


def augment_log(
    log: Log,
    driverless_rules: Dict[str, ReportingDescriptor],
    workspace_uri: Optional[str] = None,
) -> None:
    """Fill the derived fields of every result in *log*, in place.

    Args:
        log: Parsed log whose ``uri`` has already been assigned
        driverless_rules: Shared cache of rules referenced by id only,
            reused across logs so equal ids map to one descriptor
        workspace_uri: Root used to compute workspace-relative paths
    """
    for run_index, run in enumerate(log.runs):
        rules = run.tool.driver.rules
        rules_by_id = {rule.id: rule for rule in rules if rule.id}
        for result_index, result in enumerate(run.results or []):
            result.result_id = (log.uri, run_index, result_index)
            result.log_uri = log.uri

            rule = _resolve_rule(result, rules, rules_by_id, driverless_rules)
            result.rule = rule
            if result.rule_id is None and rule is not None:
                result.rule_id = rule.id

            result.level = result.level or _default_level(rule)
            result.baseline_state = result.baseline_state or DEFAULT_BASELINE
            result.message_text = _format_message(result, rule)
            result.suppression = _suppression_state(result)

            ploc = result.physical_location
            if ploc is not None:
                uri, uri_base, uri_content = parse_artifact_location(
                    log, run_index, run, ploc.artifact_location
                )
                result.uri = uri
                result.uri_base = uri_base
                result.uri_content = uri_content
                result.relative_uri = _relative_uri(ploc.artifact_location, uri, workspace_uri)
                result.region = ploc.region

    logger.debug("Augmented log %s (%d runs)", log.uri, len(log.runs))


def _resolve_rule(
    result: Result,
    rules: list,
    rules_by_id: Dict[str, ReportingDescriptor],
    driverless_rules: Dict[str, ReportingDescriptor],
) -> Optional[ReportingDescriptor]:
    if result.rule_index is not None and 0 <= result.rule_index < len(rules):
        return rules[result.rule_index]
    if result.rule_id is None:
        return None
    rule = rules_by_id.get(result.rule_id)
    if rule is not None:
        return rule
    return driverless_rules.setdefault(result.rule_id, ReportingDescriptor(id=result.rule_id))


def _default_level(rule: Optional[ReportingDescriptor]) -> str:
    if rule is not None and rule.default_configuration is not None:
        return rule.default_configuration.level or DEFAULT_LEVEL
    return DEFAULT_LEVEL


def _format_message(result: Result, rule: Optional[ReportingDescriptor]) -> str:
    message = result.message
    text = message.text
    if text is None and message.id and rule is not None:
        template = rule.message_strings.get(message.id)
        text = template.text if template else None
    if text is None:
        return ""

    arguments = message.arguments

    def substitute(match: "re.Match[str]") -> str:
        index = int(match.group(1))
        return arguments[index] if index < len(arguments) else match.group(0)

    return _PLACEHOLDER.sub(substitute, text)


def _suppression_state(result: Result) -> str:
    suppressions = result.suppressions
    if not suppressions or all(s.status == "rejected" for s in suppressions):
        return NOT_SUPPRESSED
    return SUPPRESSED


def parse_artifact_location(
    log: Log,
    run_index: int,
    run: Run,
    artifact_location: Optional[ArtifactLocation],
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Resolve an artifact location to ``(uri, uri_base, uri_content)``.

    ``uri`` is absolute when the ``uriBaseId`` chain resolves, otherwise
    the location's own uri.  ``uri_content`` is a ``sarif:`` uri when the
    artifact's contents are embedded in the log.
    """
    if artifact_location is None:
        return None, None, None

    uri = artifact_location.uri
    uri_base = _resolve_base(run, artifact_location.uri_base_id)
    if uri is not None and uri_base is not None:
        uri = urljoin(uri_base if uri_base.endswith("/") else uri_base + "/", uri)

    uri_content = None
    index = artifact_location.index
    if index is not None and 0 <= index < len(run.artifacts):
        artifact = run.artifacts[index]
        if uri is None and artifact.location is not None:
            uri = artifact.location.uri
        if artifact.contents is not None:
            name = (uri or "").rsplit("/", 1)[-1]
            encoded = quote(json.dumps([log.uri, run_index, index], separators=(",", ":")), safe="")
            uri_content = f"sarif:{encoded}/{name}"

    return uri, uri_base, uri_content


def _resolve_base(run: Run, base_id: Optional[str]) -> Optional[str]:
    parts = []
    depth = 0
    while base_id and depth < _MAX_BASE_DEPTH:
        location = run.original_uri_base_ids.get(base_id)
        if location is None or location.uri is None:
            break
        parts.append(location.uri)
        base_id = location.uri_base_id
        depth += 1
    if not parts:
        return None
    base = parts.pop()
    for part in reversed(parts):
        base = urljoin(base if base.endswith("/") else base + "/", part)
    return base


def _relative_uri(
    artifact_location: Optional[ArtifactLocation],
    uri: Optional[str],
    workspace_uri: Optional[str],
) -> Optional[str]:
    if uri is None:
        return None
    if artifact_location is not None and artifact_location.uri_base_id and artifact_location.uri:
        return artifact_location.uri
    if workspace_uri:
        root = workspace_uri if workspace_uri.endswith("/") else workspace_uri + "/"
        if uri.startswith(root):
            return uri[len(root):]
    return uri


def find_result(logs: Iterable[Log], result_id: ResultId) -> Optional[Result]:
    """Look up a result by identity; ``None`` if any part does not resolve."""
    log_uri, run_index, result_index = result_id
    for log in logs:
        if log.uri != log_uri:
            continue
        if not 0 <= run_index < len(log.runs):
            return None
        results = log.runs[run_index].results or []
        if not 0 <= result_index < len(results):
            return None
        return results[result_index]
    return None
