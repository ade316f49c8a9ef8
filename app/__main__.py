"""Main RBAC provisioning module.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from provision import main

if __name__ == "__main__":
    raise SystemExit(main())
