from __future__ import annotations

from typing import Final

# Bumped on every build that ships changed theme assets. Clients cache
# /resources/<RESOURCES_VERSION>/... forever, so a new token forces a refetch.
RESOURCES_VERSION: Final[str] = "tp4k9"
