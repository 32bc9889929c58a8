"""Sensor modules (one sub-package per sensor type)."""
