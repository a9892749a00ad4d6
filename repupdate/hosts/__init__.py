"""
Hosts — One client per git hosting provider, behind a common interface.
"""
