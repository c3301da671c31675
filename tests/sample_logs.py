"""
Sample SARIF documents shared by the panel tests.

LOG_A (one run):
    0  R1 by index, level from rule, templated message, line 10, alert property
    1  R2 by id, note, line 3, ``confidence`` property
    2  R1, baseline ``absent`` (hidden by default), relative to SRCROOT, line 2
    3  R3 without a rule definition, suppressed (hidden by default), line 20
LOG_B:
    0  R9 error in config.py
"""

import copy
import json
from typing import Any, Dict

from sarif_panel.schemas.sarif import Log

WORKSPACE_URI = "file:///repo"
URI_A = "file:///logs/a.sarif"
URI_B = "file:///logs/b.sarif"

KEY_A0 = '["file:///logs/a.sarif",0,0]'
KEY_A1 = '["file:///logs/a.sarif",0,1]'


def _location(uri: str, line: int, base_id: str = None) -> Dict[str, Any]:
    artifact: Dict[str, Any] = {"uri": uri}
    if base_id:
        artifact["uriBaseId"] = base_id
    return {"physicalLocation": {"artifactLocation": artifact, "region": {"startLine": line}}}


LOG_A_DATA: Dict[str, Any] = {
    "version": "2.1.0",
    "runs": [
        {
            "tool": {
                "driver": {
                    "name": "demo-scanner",
                    "rules": [
                        {
                            "id": "R1",
                            "name": "NoEval",
                            "defaultConfiguration": {"level": "error"},
                            "messageStrings": {"default": {"text": "Avoid {0}"}},
                        },
                        {"id": "R2", "name": "foobar"},
                    ],
                }
            },
            "originalUriBaseIds": {"SRCROOT": {"uri": "file:///repo/"}},
            "results": [
                {
                    "ruleId": "R1",
                    "ruleIndex": 0,
                    "message": {"id": "default", "arguments": ["eval"]},
                    "locations": [_location("file:///repo/src/app.py", 10)],
                    "properties": {"github/alertNumber": 7, "tags": ["security"]},
                },
                {
                    "ruleId": "R2",
                    "level": "note",
                    "message": {"text": "Unused import"},
                    "locations": [_location("file:///repo/src/util.py", 3)],
                    "properties": {"confidence": "high"},
                },
                {
                    "ruleId": "R1",
                    "ruleIndex": 0,
                    "baselineState": "absent",
                    "message": {"text": "Avoid exec"},
                    "locations": [_location("src/app.py", 2, "SRCROOT")],
                },
                {
                    "ruleId": "R3",
                    "level": "warning",
                    "message": {"text": "Weak hash"},
                    "suppressions": [{"kind": "inSource"}],
                    "locations": [_location("file:///repo/src/app.py", 20)],
                },
            ],
        }
    ],
}

LOG_B_DATA: Dict[str, Any] = {
    "version": "2.1.0",
    "runs": [
        {
            "tool": {"driver": {"name": "secrets"}},
            "results": [
                {
                    "ruleId": "R9",
                    "level": "error",
                    "message": {"text": "Hardcoded secret"},
                    "locations": [_location("file:///repo/config.py", 1)],
                },
            ],
        }
    ],
}


def make_log(data: Dict[str, Any], uri: str) -> Log:
    """Parse a fresh copy of *data* and stamp *uri* on it."""
    log = Log.model_validate(copy.deepcopy(data))
    log.uri = uri
    return log


def sarif_text(data: Dict[str, Any]) -> str:
    return json.dumps(data)
