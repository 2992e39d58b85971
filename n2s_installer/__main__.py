"""Allow ``python -m n2s_installer``."""

from n2s_installer.main import main

main()
