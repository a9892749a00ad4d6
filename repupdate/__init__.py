"""
repupdate — Keep backup git hosts in sync with source git hosts.
"""
