"""Allow ``python -m sb_dice``."""

from sb_dice.cli import main

if __name__ == "__main__":
    main()
