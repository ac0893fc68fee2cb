"""
SoupHeat CLI Entry Point

Allows running the package as a module: python -m soupheat
"""


def main():
    """Main entry point for the CLI."""
    from soupheat.cli import app

    app()


if __name__ == "__main__":
    main()
