"""
Core Module.

Configuration, logging and the exception hierarchy shared by the API
client, the CLI commands and the dashboard.
"""
