"""Allow running as ``python -m uptimedash``."""

from . import main

main()
