import unittest

from roi_tracker.portfolio.kpi import KPIStats
from roi_tracker.reports.insight import insight_variables, kpi_summary_md, render_insight_prompt


class TestInsight(unittest.TestCase):
    def setUp(self):
        self.stats = KPIStats(roi_total=3150.0, economia_anual=521200.456, horas_economizadas_ano=13000,
                              projetos_producao=2, payback_medio=500.1)

    def test_variables_cover_every_field(self):
        v = insight_variables(self.stats)
        self.assertEqual(len(v), 15)
        self.assertEqual(v["roi_total"], "3150")
        self.assertEqual(v["economia_anual"], "521200.46")
        self.assertEqual(v["payback_medio"], "500.1")
        self.assertEqual(v["custo_ia_anual"], "0")

    def test_default_prompt(self):
        text = render_insight_prompt(self.stats)
        self.assertIn("ROI Total: 3150%", text)
        self.assertIn("Projetos em produção: 2", text)
        self.assertNotIn("{", text)

    def test_custom_template_keeps_unknown_placeholders(self):
        text = render_insight_prompt(self.stats, "roi={roi_total} org={org_name} {not a field}")
        self.assertEqual(text, "roi=3150 org={org_name} {not a field}")

    def test_summary_markdown(self):
        md = kpi_summary_md(self.stats)
        self.assertTrue(md.startswith("# Portfolio KPIs\n"))
        self.assertIn("- horas_economizadas_ano: 13000\n", md)


if __name__ == '__main__':
    unittest.main()
