"""Telemetry and launch configuration."""
