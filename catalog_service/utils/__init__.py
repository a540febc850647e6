"""
Utility helpers (correlation IDs, input normalization)
"""
