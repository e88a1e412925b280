"""
Core package - Shared text and numeric helpers used by the services.
"""
