"""
Validation helpers package.
"""
