from datetime import timedelta, timezone

import app as app_module
from draw_verifier.schedule_source import DailyScheduleCache, ScheduleSourceError


def test_health_endpoint_returns_ok() -> None:
    with app_module.app.test_client() as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_health_does_not_touch_schedule_source(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    class BrokenSource:
        def load(self, day, tz):  # type: ignore[no-untyped-def]
            raise ScheduleSourceError("offline")

    tz = timezone(timedelta(hours=8))
    monkeypatch.setattr(app_module, "schedule_cache", DailyScheduleCache(BrokenSource(), tz))
    with app_module.app.test_client() as client:
        assert client.get("/health").status_code == 200
