"""Allow running as ``python -m maven_gmm``."""

from maven_gmm.cli import main

main()
