# cmdsense/__main__.py
"""
Entry point for cmdsense.
"""
from cmdsense.cli import run

if __name__ == "__main__":
    run()
