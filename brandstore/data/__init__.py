"""Relational storage: engine setup, models and the query adapter."""
