"""Allow `python -m miri_launch`."""

from miri_launch.main import main

if __name__ == "__main__":
    main()
