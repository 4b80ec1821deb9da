"""Create, lock, rename or delete accounts in the JSON account store.

Usage: python bin/manage-accounts.py <add|passwd|lock|unlock|rename|delete> ...

Configuration comes from PASSGATE_* environment variables.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from passgate.admin import main

if __name__ == "__main__":
    sys.exit(main())
