"""
Prefect flows for the climatology pipeline.

Flows:
- climatology: rasterize, normalize, average and classify survey tables

Usage (local):
    python -m survey_climatology.flows.climatology observations.csv effort.csv

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    survey-climatology build observations.csv effort.csv --by common-name
"""
