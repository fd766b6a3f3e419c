"""nifi-deploy command line interface (Typer + Rich)."""
