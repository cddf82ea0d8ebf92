"""Allow running as ``python -m kill_em_all``."""

from .cli.main import main

if __name__ == "__main__":
    main()
