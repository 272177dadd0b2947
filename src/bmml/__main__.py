"""Allow ``python -m bmml``."""

from bmml.cli import main

if __name__ == "__main__":
    main()
