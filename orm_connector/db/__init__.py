"""
Database package: connection handle, database connector and model registrar.
"""
