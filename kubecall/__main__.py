"""
CLI entry point, when used as a module: `python -m kubecall`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kubecall").
"""
from kubecall import cli

if __name__ == '__main__':
    cli.main()
