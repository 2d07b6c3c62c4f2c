"""myshell CLI bootstrap."""

from myshell.cli.app import app

if __name__ == "__main__":
    app()
