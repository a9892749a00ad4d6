"""
Mirror — Compare and copy refs between two repository URLs with git.
"""
