"""Allow `python -m pysway`."""

from .client import main

main()
