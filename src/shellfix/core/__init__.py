"""Correction engine: command model, rule interface, corrected commands and the corrector."""
