"""Deterministic symptom triage engine."""
