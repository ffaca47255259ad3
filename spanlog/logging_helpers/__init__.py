"""
Logging helpers: span-context formatters, handlers, output format selection
and third-party logging integrations.
"""
