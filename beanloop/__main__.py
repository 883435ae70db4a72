"""Entry point for the beanloop CLI.

Allows running the generator with ``python -m beanloop``.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
