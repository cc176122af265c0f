"""Command-line tools for hosuto operators.

Run ``python -m src.cli --help`` for the available subcommands.
"""
