import sys

from pdfoverlay.cli import main

if __name__ == '__main__':
    sys.exit(main())
