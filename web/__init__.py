"""
Web layer for the equity engine.
"""
