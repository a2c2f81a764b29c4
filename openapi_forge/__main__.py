"""Entry point: python -m openapi_forge SCHEMA GENERATOR [options]"""

from .cli import main

if __name__ == "__main__":
    main()
