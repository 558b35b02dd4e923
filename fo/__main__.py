"""Allow `python -m fo`."""

from fo.cli import main

if __name__ == "__main__":
    main()
