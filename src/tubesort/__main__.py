"""Allow running the tube sorter with `python -m tubesort`."""

from tubesort import main

main()
