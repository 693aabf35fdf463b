"""
Package lists — manifest parsing and service resolution.
"""

from distropkg.core.services.packages.manifest import (  # noqa: F401
    parse_manifest,
    parse_package_files,
)
from distropkg.core.services.packages.resolver import (  # noqa: F401
    get_packages,
    package_dir_for,
    resolve_packages,
    select_manifest_files,
)
