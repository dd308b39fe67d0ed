"""Module entrypoint for ``python -m better_diff``."""

from .cli import console_main


if __name__ == "__main__":
    console_main()
