from __future__ import annotations
from dataclasses import asdict
import re
from typing import Dict, Optional

from roi_tracker.portfolio.kpi import KPIStats

DEFAULT_PROMPT = (
    "Analise os dados de ROI de projetos de IA desta organização:\n"
    "- ROI Total: {roi_total}%\n"
    "- Economia Anual: R$ {economia_anual}\n"
    "- Horas economizadas: {horas_economizadas_ano}h\n"
    "- Projetos em produção: {projetos_producao}\n"
    "- Payback médio: {payback_medio} meses\n\n"
    "Forneça um insight estratégico curto (3 frases) em Português sobre o desempenho e onde focar."
)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _fmt(v) -> str:
    if isinstance(v, float):
        return f"{v:.2f}".rstrip("0").rstrip(".") if v != int(v) else str(int(v))
    return str(v)


def insight_variables(stats: KPIStats) -> Dict[str, str]:
    """Every KPIStats field as a plain string, ready for template substitution."""
    return {k: _fmt(v) for k, v in asdict(stats).items()}


def render_insight_prompt(stats: KPIStats, template: Optional[str] = None) -> str:
    """Fill ``{field}`` placeholders; unknown placeholders are left as written."""
    values = insight_variables(stats)
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template or DEFAULT_PROMPT)


def kpi_summary_md(stats: KPIStats) -> str:
    lines = ["# Portfolio KPIs", ""]
    for k, v in insight_variables(stats).items():
        lines.append(f"- {k}: {v}")
    return "\n".join(lines) + "\n"
