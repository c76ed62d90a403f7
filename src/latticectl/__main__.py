"""Allow ``python -m latticectl``."""

from latticectl.cli import main

if __name__ == "__main__":
    main()
