"""Logging and metrics for kubetmpl."""
