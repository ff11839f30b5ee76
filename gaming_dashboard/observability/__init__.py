"""
Observability module for the Gaming Dashboard backend.

Structured logging with per-run context (agent name + run id) so
scheduler ticks can be followed through the logs.
"""
