"""
Models — Repository values, ref differences and the backup tag convention.
"""
