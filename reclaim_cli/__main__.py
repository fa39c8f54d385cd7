"""Allow ``python -m reclaim_cli``."""

from reclaim_cli.cli.main import run

if __name__ == "__main__":
    run()
