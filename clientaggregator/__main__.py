"""
CLI entry point, when used as a module: `python -m clientaggregator`.
"""
from clientaggregator import cli

if __name__ == '__main__':
    cli.main()
