"""
`python -m paperplane` entrypoint.

This is mainly for convenience; the installed console script `paperplane` calls
the same `paperplane.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
