"""
Punto de entrada: python -m cqtool
"""

from cqtool.cli import app

if __name__ == "__main__":
    app()
