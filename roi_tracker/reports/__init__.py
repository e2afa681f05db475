"""Plain-text outputs for presentation consumers: insight prompt variables and KPI summary."""
