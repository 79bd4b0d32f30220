"""Entry point for ``python -m make_async_function``."""

from .cli import main

if __name__ == "__main__":
    main()
