"""Allow ``python -m src.cli`` execution."""

from src.cli.cache import main

main()
