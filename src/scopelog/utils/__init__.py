"""Utility functions for scopelog.

This package contains helpers shared by the pipeline stages.
"""
