"""Merged pack output.

This package writes merged entries to zip archives or directory trees
and answers existing-destination queries for the skip policy.
"""
