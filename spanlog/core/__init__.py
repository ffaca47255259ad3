"""
Core tracing pipeline: span registry, tracer and metrics initialization,
task timing.
"""
