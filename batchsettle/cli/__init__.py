"""batchsettle CLI: Typer-based command-line interface.

Provides the ``batchsettle`` command with subcommands for validating plan
files, simulating immediate batches, and running the reference scenarios.

All output uses Rich for formatted terminal display.
"""
