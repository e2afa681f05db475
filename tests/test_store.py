import unittest
from datetime import datetime, timedelta, timezone

from roi_tracker.domain.types import ImprovementType, ProjectStatus
from roi_tracker.store.base import NotFoundError
from roi_tracker.store.memory import InMemoryStore


class TestInMemoryStore(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.p = self.store.create_project({"organization_id": "acme", "name": "Bot", "status": "production",
                                            "implementation_cost": 1000})

    def test_create_project_assigns_id_and_timestamp(self):
        self.assertTrue(self.p.id.startswith("p_"))
        self.assertIsNotNone(self.p.created_at)
        self.assertEqual(self.p.status, ProjectStatus.PRODUCTION)
        self.assertIs(self.store.get_project(self.p.id), self.p)

    def test_negative_cost_rejected(self):
        with self.assertRaises(ValueError):
            self.store.create_project({"organization_id": "acme", "monthly_maintenance_cost": -1})
        with self.assertRaises(ValueError):
            self.store.save_project(self.p.id, {"implementation_cost": -5})

    def test_list_projects_filters_and_orders_newest_first(self):
        self.store.create_project({"id": "old", "organization_id": "acme", "created_at": "2020-01-01T00:00:00Z"})
        self.store.create_project({"id": "new", "organization_id": "acme", "created_at": "2999-01-01T00:00:00Z"})
        self.store.create_project({"id": "other", "organization_id": "globex"})
        ids = [p.id for p in self.store.list_projects("acme")]
        self.assertEqual(ids[0], "new")
        self.assertEqual(ids[-1], "old")
        self.assertNotIn("other", ids)
        self.assertEqual(len(self.store.list_projects()), 4)

    def test_save_project_partial(self):
        updated = self.store.save_project(self.p.id, {"name": "Copilot", "monthly_maintenance_cost": "50"})
        self.assertEqual(updated.name, "Copilot")
        self.assertEqual(updated.monthly_maintenance_cost, 50)
        self.assertEqual(updated.implementation_cost, 1000)
        with self.assertRaises(NotFoundError):
            self.store.save_project("missing", {"name": "x"})

    def test_indicator_lifecycle(self):
        ind = self.store.create_indicator(self.p.id, {"improvement_type": "revenue_increase",
                                                      "baseline": {"revenue": 10}, "postIA": {"revenue": 20}})
        self.assertTrue(ind.id.startswith("i_"))
        self.assertEqual(ind.improvement_type, ImprovementType.REVENUE_INCREASE)
        self.assertEqual(ind.post_ia.revenue, 20)

        updated = self.store.save_indicator(ind.id, {"postIA": {"revenue": 40}})
        self.assertEqual(updated.post_ia.revenue, 40)
        self.assertEqual(updated.baseline.revenue, 10)

        self.store.delete_indicator(ind.id)
        self.assertEqual(self.store.list_active_indicators(self.p.id), [])
        self.assertEqual(len(self.store.list_indicators(self.p.id, include_inactive=True)), 1)
        self.assertFalse(self.store.get_indicator(ind.id).is_active)

    def test_non_finite_values_rejected(self):
        with self.assertRaises(ValueError):
            self.store.create_project({"organization_id": "acme", "implementation_cost": "inf"})
        with self.assertRaises(ValueError):
            self.store.save_project(self.p.id, {"monthly_maintenance_cost": float("nan")})
        with self.assertRaises(ValueError):
            self.store.create_indicator(self.p.id, {"improvement_type": "productivity", "baseline": {
                "people": [{"hourlyRate": "inf", "minutesSpent": 1, "frequencyQuantity": 1}]}})
        ind = self.store.create_indicator(self.p.id, {"improvement_type": "other"})
        with self.assertRaises(ValueError):
            self.store.save_indicator(ind.id, {"baseline": {"value": "nan"}})
        self.assertEqual(self.store.get_project(self.p.id).implementation_cost, 1000)
        self.assertEqual(self.store.list_active_indicators(self.p.id), [ind])

    def test_indicator_requires_project(self):
        with self.assertRaises(NotFoundError):
            self.store.create_indicator("missing", {"improvement_type": "other"})
        with self.assertRaises(NotFoundError):
            self.store.save_indicator("missing", {})

    def test_delete_project_cascades(self):
        ind = self.store.create_indicator(self.p.id, {"improvement_type": "other"})
        self.store.delete_project(self.p.id)
        self.assertIsNone(self.store.get_project(self.p.id))
        self.assertIsNone(self.store.get_indicator(ind.id))
        with self.assertRaises(NotFoundError):
            self.store.delete_project(self.p.id)

    def test_purge_respects_retention(self):
        keep = self.store.create_indicator(self.p.id, {"improvement_type": "other"})
        gone = self.store.create_indicator(self.p.id, {"improvement_type": "other"})
        self.store.delete_indicator(gone.id)

        res = self.store.purge_inactive_indicators(90)
        self.assertEqual(res["deleted_count"], 0)

        later = datetime.now(timezone.utc) + timedelta(days=91)
        res = self.store.purge_inactive_indicators(90, now=later)
        self.assertEqual(res["deleted_count"], 1)
        self.assertEqual(res["deleted_ids"], [gone.id])
        self.assertEqual(res["retention_days"], 90)
        self.assertTrue(res["cutoff_date"].endswith("Z"))
        self.assertIsNone(self.store.get_indicator(gone.id))
        self.assertIsNotNone(self.store.get_indicator(keep.id))


if __name__ == '__main__':
    unittest.main()
