"""
Host hook entrypoints.

Each hook reads one JSON payload from stdin, does its work, and exits 0
regardless of outcome. Diagnostics go to stderr; stdout carries only the
payload the host consumes.
"""
