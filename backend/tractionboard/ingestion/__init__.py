"""Upload ingestion for Tractionboard.

Decodes uploaded CSV/XLSX files and classifies their rows into scorecard,
VTO, issue and to-do records with a unified ImportResult interface.
"""
