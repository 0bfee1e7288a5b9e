"""Expiry worker entrypoint.

Loads environment variables from .env automatically (project root).
"""

from taskai.worker import main


if __name__ == "__main__":
    main()
