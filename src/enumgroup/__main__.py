"""Allow ``python -m enumgroup``."""

from enumgroup.cli import main

if __name__ == "__main__":
    main()
