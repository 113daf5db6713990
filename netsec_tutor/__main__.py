"""
Entry point for running the tutor package as a module.

Run with:
    python -m netsec_tutor
"""

from netsec_tutor.interfaces.cli import main

if __name__ == "__main__":
    main()
