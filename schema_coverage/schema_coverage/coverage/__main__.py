"""Module entrypoint for `python -m schema_coverage.coverage`.

Delegates to the coverage CLI implementation.
"""

from .run_coverage import main


if __name__ == "__main__":
    main()
