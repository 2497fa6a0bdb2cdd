"""Entry point for ``python -m callmap``."""

from callmap.presentation.cli.main import main

if __name__ == "__main__":
    main()
