"""Allow ``python -m heic_batch``."""

from heic_batch.cli import main

if __name__ == "__main__":
    main()
