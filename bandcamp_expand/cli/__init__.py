"""
Command-line interface layer built on Typer and Rich.
"""
