"""
Store credential checks.
"""
