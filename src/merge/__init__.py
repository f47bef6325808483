"""Merge engine.

This package resolves path collisions between packs, synthesizes pack
metadata, and exposes the public merge operations.
"""
