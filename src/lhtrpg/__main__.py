"""Allow ``python -m lhtrpg``."""

from lhtrpg.main import main

if __name__ == "__main__":
    main()
