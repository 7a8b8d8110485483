"""
CLI entry point, when used as a module: `python -m ownertree`.

Useful for debugging in the IDEs (use the start-mode "Module", module "ownertree").
"""
from ownertree import cli

if __name__ == '__main__':
    cli.main()
