import unittest

from roi_tracker.domain.parsing import indicator_from_dict, project_from_dict
from roi_tracker.projects.roi import project_metrics, recalculate, total_cost


def revenue(iid, before, after, active=True):
    return indicator_from_dict({"id": iid, "project_id": "p1", "improvement_type": "revenue_increase",
                                "baseline": {"revenue": before}, "postIA": {"revenue": after},
                                "is_active": active})


class TestProjectROI(unittest.TestCase):
    def test_total_cost_is_first_year(self):
        p = project_from_dict({"id": "p1", "implementation_cost": 10000, "monthly_maintenance_cost": 500})
        self.assertEqual(total_cost(p), 16000)

    def test_recalculate(self):
        p = project_from_dict({"id": "p1", "implementation_cost": 10000, "monthly_maintenance_cost": 500})
        r = recalculate(p, [revenue("a", 0, 2000), revenue("b", 1000, 1500)])
        self.assertEqual(r.total_economy_annual, 30000)
        self.assertAlmostEqual(r.roi_percentage, 87.5)

    def test_zero_cost_project_has_zero_roi(self):
        p = project_from_dict({"id": "p1"})
        r = recalculate(p, [revenue("a", 0, 100)])
        self.assertEqual(r.total_economy_annual, 1200)
        self.assertEqual(r.roi_percentage, 0)

    def test_no_indicators(self):
        p = project_from_dict({"id": "p1", "implementation_cost": 100})
        r = recalculate(p, [])
        self.assertEqual(r.total_economy_annual, 0)
        self.assertEqual(r.roi_percentage, -100)

    def test_metrics_payback(self):
        p = project_from_dict({"id": "p1", "implementation_cost": 6000})
        m = project_metrics(p, [revenue("a", 0, 1000)])
        self.assertEqual(m.monthly_economy, 1000)
        self.assertEqual(m.annual_economy, 12000)
        self.assertEqual(m.total_cost, 6000)
        self.assertEqual(m.payback_months, 6)
        self.assertEqual(m.roi_percentage, 100)

    def test_metrics_no_payback_when_losing(self):
        p = project_from_dict({"id": "p1", "implementation_cost": 6000})
        m = project_metrics(p, [revenue("a", 1000, 500)])
        self.assertEqual(m.payback_months, 0)


if __name__ == '__main__':
    unittest.main()
