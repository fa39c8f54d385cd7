"""
Command-Line Interface.

Typer app, global options, output formatting and request payload builders.
"""
