"""Pack input reading.

This package resolves user inputs into typed sources and reads them
into sanitized entries for the merge engine.
"""
