# tests/core/traceability/test_manifest_step_updates.py
"""
Testes de atualização incremental de Steps no Manifest.
"""

from datetime import datetime, timezone

from pages_flow.core.traceability.manifest import create_manifest, step_failed, step_finished, step_started


def _m():
    return create_manifest(
        run_id="r1",
        started_at=datetime(2026, 1, 16, tzinfo=timezone.utc),
        pages_flow_version="0.1.0",
        config_hash="h",
    )


def test_incremental_step_update_records_status_and_timestamps():
    m = _m()
    t0 = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)
    t1 = datetime(2026, 1, 16, 0, 0, 1, 500000, tzinfo=timezone.utc)

    step_started(m, step_id="build.book.guide", kind="build", ts=t0, job="build")
    assert m.steps["build.book.guide"]["status"] == "running"

    step_finished(
        m,
        step_id="build.book.guide",
        ts=t1,
        result={"status": "success", "summary": "book compiled", "metrics": {"files": 3}},
    )
    s = m.steps["build.book.guide"]
    assert s["status"] == "success"
    assert s["duration_ms"] == 1500
    assert s["metrics"] == {"files": 3}
    assert s["job"] == "build"
    assert [e["event_type"] for e in m.events] == ["step_started", "step_finished"]


def test_skipped_step_has_zero_duration():
    m = _m()
    t = datetime(2026, 1, 16, 0, 0, 5, tzinfo=timezone.utc)
    step_finished(m, step_id="package.bundle", ts=t, result={"status": "skipped", "summary": "skipped due to failed dependency"})

    assert m.steps["package.bundle"]["status"] == "skipped"
    assert m.steps["package.bundle"]["duration_ms"] == 0


def test_failed_step_is_recorded():
    m = _m()
    t0 = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)
    t1 = datetime(2026, 1, 16, 0, 0, 2, tzinfo=timezone.utc)
    error = {"type": "ARTIFACT_NOT_FOUND", "message": "Artefato não encontrado", "details": {}, "hint": None}

    step_started(m, step_id="fetch.artifact.verusdoc", kind="fetch", ts=t0)
    step_failed(m, step_id="fetch.artifact.verusdoc", ts=t1, error=error)

    s = m.steps["fetch.artifact.verusdoc"]
    assert s["status"] == "failed"
    assert s["error"]["type"] == "ARTIFACT_NOT_FOUND"
    assert s["summary"] == "Artefato não encontrado"
    assert s["duration_ms"] == 2000
    assert m.events[-1] == {
        "event_type": "step_failed",
        "timestamp": "2026-01-16T00:00:02+00:00",
        "step_id": "fetch.artifact.verusdoc",
        "payload": {"error": "ARTIFACT_NOT_FOUND"},
    }
