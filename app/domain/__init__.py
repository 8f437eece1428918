"""
Domain models package.
"""
