from datetime import datetime, timezone

import pytest

from app.ingestion.enrichment import compute_carbon_saving, enrich_activity


def test_carbon_saving_uses_per_km_coefficient():
    assert compute_carbon_saving(5000) == pytest.approx(1.2)
    assert compute_carbon_saving(0) == 0


def test_enrich_activity_sets_derived_fields_and_timestamps(make_activity):
    now = datetime(2025, 1, 10, 12, 30, tzinfo=timezone.utc)

    enriched = enrich_activity(make_activity(distance=12500.0), 20.0, now=now)

    assert enriched.speed == 20.0
    assert enriched.carbon_saving == pytest.approx(3.0)
    assert enriched.imported_at_utc == "2025-01-10T12:30:00+00:00"
    assert enriched.imported_at == now.astimezone().replace(tzinfo=None)
    assert enriched.imported_at.tzinfo is None


def test_enrich_activity_defaults_to_current_time(make_activity):
    before = datetime.now(timezone.utc)

    enriched = enrich_activity(make_activity(), 20.0)

    stamped = datetime.fromisoformat(enriched.imported_at_utc)
    assert stamped.tzinfo is not None
    assert stamped >= before
