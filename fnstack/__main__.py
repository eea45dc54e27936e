"""Allow ``python -m fnstack``."""

from fnstack.cli import main

if __name__ == "__main__":
    main()
