"""Allow ``python -m dlmm_positions``."""
from .cli import main

if __name__ == "__main__":
    main()
