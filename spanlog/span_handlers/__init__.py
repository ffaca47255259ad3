"""
Span handlers: aggregation of the active span chain for log records.
"""
