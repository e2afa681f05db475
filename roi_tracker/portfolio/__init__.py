"""Portfolio aggregation over projects and their active indicators.

- kpi.py: consolidated KPIStats (ROI, economy, hours, payback, labor/AI cost split)
- history.py: monthly economy series by go-live month
- distribution.py: annual economy per improvement type
"""
