"""
Engine — Discovery, source resolution, backup reconciliation and scrub.
"""
