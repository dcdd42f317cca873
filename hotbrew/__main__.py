"""Allow ``python -m hotbrew``."""
from hotbrew.cli.main import main

if __name__ == "__main__":
    main()
