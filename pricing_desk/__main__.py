"""Allow running as: python -m pricing_desk"""

from pricing_desk.main import run, serve
import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    else:
        spread_arg = float(sys.argv[1]) if len(sys.argv) > 1 else None
        run(spread_arg)
