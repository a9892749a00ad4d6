"""
Config — Host configuration file schema and loader.
"""
