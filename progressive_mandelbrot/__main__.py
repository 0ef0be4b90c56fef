import sys

from progressive_mandelbrot.cli import main

if __name__ == "__main__":
    sys.exit(main())
