"""
src/pages_flow/report/report_md.py

Gerador canônico de `report.md` de uma run de publicação.

Regras:
- O report.md é derivado EXCLUSIVAMENTE do Manifest final (dict).
- Não infere, não recalcula, não acessa o filesystem.
- Mesmo Manifest => mesmo report.md (ordenação estável).

Estrutura mínima obrigatória:
# Publication Report

## Summary
## Trigger
## Jobs
## Site Layout
## Deployment
## Failures
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple


REQUIRED_SECTIONS: List[str] = [
    "# Publication Report",
    "## Summary",
    "## Trigger",
    "## Jobs",
    "## Site Layout",
    "## Deployment",
    "## Failures",
    "## Execution Metadata",
]


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _require_manifest(manifest: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate report.md")
    return manifest


def _step_line(step_id: str, step: Dict[str, Any]) -> str:
    status = step.get("status", "unknown")
    kind = step.get("kind", "unknown")
    summary = step.get("summary") or ""
    duration = step.get("duration_ms")
    line = f"- **{step_id}** (`{kind}`): `{status}`"
    if duration is not None:
        line += f" in {duration} ms"
    if summary:
        line += f". {summary}"
    return line


def _gate_transitions(events: List[Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for ev in events:
        if isinstance(ev, dict) and ev.get("event_type") == "gate_transition":
            payload = ev.get("payload")
            out.append(payload if isinstance(payload, dict) else {})
    return out


def generate_report_md(manifest: Dict[str, Any]) -> str:
    """Gera o conteúdo completo do report.md a partir do Manifest final."""
    manifest = _require_manifest(manifest)

    run = manifest.get("run") if isinstance(manifest.get("run"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    steps = manifest.get("steps") if isinstance(manifest.get("steps"), dict) else {}
    events = manifest.get("events") if isinstance(manifest.get("events"), list) else []

    lines: List[str] = []
    lines.append("# Publication Report\n")

    lines.append("## Summary")
    lines.append(f"- **Run ID**: `{run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Started At (UTC)**: `{run.get('started_at', '<unknown>')}`")
    lines.append(f"- **Finished At (UTC)**: `{run.get('finished_at', '<unknown>')}`")
    lines.append(f"- **Outcome**: `{run.get('outcome', '<unknown>')}`")
    lines.append(f"- **pages_flow Version**: `{run.get('pages_flow_version', '<unknown>')}`")
    lines.append("")

    lines.append("## Trigger")
    trigger = run.get("trigger")
    if isinstance(trigger, dict) and trigger:
        for k, v in _sorted_items(trigger):
            lines.append(f"- **{k}**: `{v}`")
    else:
        lines.append("No trigger event recorded in the Manifest.")
    lines.append("")

    lines.append("## Jobs")
    by_job: Dict[str, List[Tuple[str, Dict[str, Any]]]] = {}
    for step_id, step in _sorted_items(steps):
        if isinstance(step, dict):
            by_job.setdefault(str(step.get("job") or "unassigned"), []).append((step_id, step))
    if by_job:
        for job, job_steps in sorted(by_job.items()):
            lines.append(f"### {job}")
            for step_id, step in job_steps:
                lines.append(_step_line(step_id, step))
    else:
        lines.append("No steps recorded in the Manifest.")
    lines.append("")

    lines.append("## Site Layout")
    bundle_step = steps.get("package.bundle") if isinstance(steps.get("package.bundle"), dict) else {}
    bundle = (bundle_step.get("artifacts") or {}).get("bundle") if bundle_step else None
    if isinstance(bundle, dict) and bundle:
        lines.append(f"- **Bundle**: `{bundle.get('path')}`")
        lines.append(f"- **sha256**: `{bundle.get('sha256')}`")
        lines.append(f"- **Bytes**: `{bundle.get('bytes')}`")
        lines.append(f"- **Files**: `{bundle.get('file_count')}`")
        for entry in bundle.get("entries") or []:
            lines.append(f"  - `{entry}/`")
    else:
        lines.append("No bundle recorded in the Manifest.")
    lines.append("")

    lines.append("## Deployment")
    transitions = _gate_transitions(events)
    if transitions:
        for t in transitions:
            line = f"- `{t.get('from')}` → `{t.get('to')}`"
            if t.get("url"):
                line += f" (url: {t['url']})"
            if t.get("error"):
                line += f" (error: `{t['error']}`)"
            lines.append(line)
    else:
        lines.append("Deployment gate never left `pending`.")
    if run.get("url"):
        lines.append(f"\n**Published URL**: {run['url']}")
    lines.append("")

    lines.append("## Failures")
    failures = [(sid, s) for sid, s in _sorted_items(steps) if isinstance(s, dict) and s.get("status") == "failed"]
    if failures:
        for sid, s in failures:
            error = s.get("error") if isinstance(s.get("error"), dict) else {}
            lines.append(f"### {sid}")
            lines.append(f"- **Type**: `{error.get('type', '<unknown>')}`")
            lines.append(f"- **Message**: {error.get('message', '')}")
            if error.get("hint"):
                lines.append(f"- **Hint**: {error['hint']}")
            if error.get("details"):
                lines.append("```json")
                lines.append(_as_pretty_json(error.get("details")))
                lines.append("```")
    else:
        lines.append("No failed steps recorded in the Manifest.")
    lines.append("")

    lines.append("## Execution Metadata")
    lines.append(f"- Events recorded: `{len(events)}`")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines) + "\n"

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content
