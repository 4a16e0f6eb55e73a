"""Release objects exchanged with the forge."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Asset:
    """A file attached to a release.

    Attributes:
        path: Local path when uploading; the asset file name when read back
        url: Browser download URL, populated only for releases read from the forge
    """

    path: str
    url: Optional[str] = None


@dataclass
class Release:
    """A release to create on, or read from, the forge.

    Attributes:
        name: Release name, also used as the tag name
        description: Release notes body
        assets: Files attached to the release
        commit: Target commitish for the tag; empty means the default branch
        generate_release_notes: Ask the forge to generate release notes
        make_latest: "true" or "false", whether the release becomes latest
    """

    name: str
    description: str = ""
    assets: List[Asset] = field(default_factory=list)
    commit: str = ""
    generate_release_notes: bool = False
    make_latest: str = "true"
