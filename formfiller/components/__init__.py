"""
Fill engine: locate fields, inject values, pick options, sequence steps.
"""
