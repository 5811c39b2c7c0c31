"""Probability models for VALUEPLAY."""
