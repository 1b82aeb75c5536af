"""Application services: search, analysis, KPIs and exports."""
