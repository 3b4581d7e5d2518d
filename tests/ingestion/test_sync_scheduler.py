import app.ingestion.scheduler as scheduler_module
from app.ingestion.sync import SyncSummary


def test_sync_tick_runs_pipeline(monkeypatch):
    calls = []

    def fake_run_sync():
        calls.append(1)
        return SyncSummary(fetched=1, inserted=1)

    monkeypatch.setattr(scheduler_module, "run_sync", fake_run_sync)

    scheduler_module.sync_tick()

    assert calls == [1]


def test_sync_tick_swallows_errors(monkeypatch):
    def broken_run_sync():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(scheduler_module, "run_sync", broken_run_sync)

    scheduler_module.sync_tick()
