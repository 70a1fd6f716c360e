"""
Generate a random value for ENCRYPTION_SECRET.
"""

from __future__ import annotations

import secrets


def main() -> None:
    print(secrets.token_urlsafe(48))


if __name__ == "__main__":
    main()
