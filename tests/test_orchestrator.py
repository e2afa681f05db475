import threading
import unittest
from datetime import date

from roi_tracker.api.orchestrator import RoiService
from roi_tracker.store.base import NotFoundError
from roi_tracker.store.memory import InMemoryStore


def revenue_payload(before, after):
    return {"improvement_type": "revenue_increase", "baseline": {"revenue": before}, "postIA": {"revenue": after}}


class TestRoiService(unittest.TestCase):
    def setUp(self):
        self.svc = RoiService(InMemoryStore())
        self.p = self.svc.create_project({"organization_id": "acme", "name": "Bot", "status": "production",
                                          "implementation_cost": 10000, "monthly_maintenance_cost": 500,
                                          "go_live_date": "2024-03-01"})

    def test_indicator_writes_refresh_cached_roi(self):
        ind = self.svc.create_indicator(self.p.id, revenue_payload(0, 2000))
        p = self.svc.store.get_project(self.p.id)
        self.assertEqual(p.total_economy_annual, 24000)
        self.assertAlmostEqual(p.roi_percentage, 50.0)

        self.svc.update_indicator(ind.id, {"postIA": {"revenue": 4000}})
        p = self.svc.store.get_project(self.p.id)
        self.assertEqual(p.total_economy_annual, 48000)
        self.assertAlmostEqual(p.roi_percentage, 200.0)

        self.svc.delete_indicator(ind.id)
        p = self.svc.store.get_project(self.p.id)
        self.assertEqual(p.total_economy_annual, 0)
        self.assertAlmostEqual(p.roi_percentage, -100.0)

    def test_cost_update_refreshes_and_cached_fields_are_ignored(self):
        self.svc.create_indicator(self.p.id, revenue_payload(0, 2000))
        p = self.svc.update_project(self.p.id, {"monthly_maintenance_cost": 0, "roi_percentage": 999})
        self.assertAlmostEqual(p.roi_percentage, 140.0)
        renamed = self.svc.update_project(self.p.id, {"name": "Copilot", "total_economy_annual": 1})
        self.assertEqual(renamed.name, "Copilot")
        self.assertEqual(renamed.total_economy_annual, 24000)

    def test_create_ignores_cached_roi_fields(self):
        p = self.svc.create_project({"organization_id": "acme", "name": "x", "status": "production",
                                     "implementation_cost": 1000, "roi_percentage": 9999,
                                     "total_economy_annual": 123456, "id": "chosen"})
        self.assertIsNone(p.roi_percentage)
        self.assertIsNone(p.total_economy_annual)
        self.assertNotEqual(p.id, "chosen")
        stats = self.svc.dashboard("acme")["stats"]
        self.assertNotEqual(stats.roi_total, 9999)
        self.assertEqual(stats.economia_anual, 0)

    def test_delete_project_releases_lock(self):
        self.svc.create_indicator(self.p.id, revenue_payload(0, 1))
        self.assertIn(self.p.id, self.svc._locks)
        self.svc.delete_project(self.p.id)
        self.assertNotIn(self.p.id, self.svc._locks)

    def test_missing_ids(self):
        with self.assertRaises(NotFoundError):
            self.svc.create_indicator("missing", revenue_payload(0, 1))
        with self.assertRaises(NotFoundError):
            self.svc.update_indicator("missing", {})
        with self.assertRaises(NotFoundError):
            self.svc.indicator_stats("missing")
        with self.assertRaises(NotFoundError):
            self.svc.project_summary("missing")

    def test_project_summary(self):
        self.svc.create_indicator(self.p.id, revenue_payload(0, 1000))
        summary = self.svc.project_summary(self.p.id)
        self.assertEqual(summary["project"]["id"], self.p.id)
        self.assertEqual(summary["metrics"]["monthly_economy"], 1000)
        self.assertEqual(summary["metrics"]["payback_months"], 10)

    def test_indicator_stats_uses_overrides(self):
        svc = RoiService(InMemoryStore(), frequency_overrides={"week": 50})
        p = svc.create_project({"organization_id": "acme"})
        ind = svc.create_indicator(p.id, {"improvement_type": "related_costs", "baseline": {"tools": [
            {"monthlyCost": 10, "frequencyQuantity": 1, "frequencyUnit": "week"}]}})
        self.assertAlmostEqual(svc.indicator_stats(ind.id).annual_economy, 500)

    def test_dashboard(self):
        self.svc.create_indicator(self.p.id, revenue_payload(0, 2000))
        other = self.svc.create_project({"organization_id": "globex", "status": "production"})
        self.svc.create_indicator(other.id, revenue_payload(0, 99999))

        data = self.svc.dashboard("acme", today=date(2024, 6, 1))
        self.assertEqual(data["stats"].economia_anual, 24000)
        self.assertEqual(data["stats"].projetos_producao, 1)
        self.assertEqual([h.period for h in data["economy_history"]], ["2024-03"])
        self.assertEqual(data["distribution_by_type"][0].improvement_type, "revenue_increase")
        self.assertEqual(len(data["projects"]), 1)
        self.assertEqual(len(data["indicators"]), 1)

    def test_dashboard_skips_unreadable_project(self):
        self.svc.create_indicator(self.p.id, revenue_payload(0, 2000))
        broken = self.svc.create_project({"organization_id": "acme"})
        real = self.svc.store.list_active_indicators

        def flaky(project_id):
            if project_id == broken.id:
                raise RuntimeError("backend down")
            return real(project_id)

        self.svc.store.list_active_indicators = flaky
        with self.assertLogs("roi_tracker.api.orchestrator", level="ERROR"):
            data = self.svc.dashboard("acme")
        self.assertEqual(len(data["projects"]), 2)
        self.assertEqual(len(data["indicators"]), 1)

    def test_concurrent_indicator_writes_end_consistent(self):
        def worker():
            for _ in range(10):
                self.svc.create_indicator(self.p.id, revenue_payload(0, 100))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        p = self.svc.store.get_project(self.p.id)
        self.assertEqual(p.total_economy_annual, 40 * 100 * 12)

    def test_purge_uses_configured_retention(self):
        svc = RoiService(InMemoryStore(), retention_days=0)
        p = svc.create_project({"organization_id": "acme"})
        ind = svc.create_indicator(p.id, revenue_payload(0, 1))
        svc.delete_indicator(ind.id)
        res = svc.purge_inactive_indicators()
        self.assertEqual(res["retention_days"], 0)


if __name__ == '__main__':
    unittest.main()
