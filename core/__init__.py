"""HealthGuard Core Module.

Cross-cutting concerns: logging configuration, tracing and metrics.
"""
