"""Entry point for running nanorouter as a module: python -m nanorouter"""

from nanorouter.cli.main import app

if __name__ == "__main__":
    app()
