"""
Distro classifier — detection, classification and vendor predicates.

    from distropkg.core.services.distro import detect_os, is_ubuntu
"""

from distropkg.core.services.distro.classifier import (  # noqa: F401
    build_distro_info,
    classify_family,
    compute_distro_tag,
)
from distropkg.core.services.distro.detect import (  # noqa: F401
    detect_os,
    ensure_lsb_release,
    exit_distro_not_supported,
    is_arch,
    is_fedora,
    is_oraclelinux,
    is_suse,
    is_ubuntu,
    package_manager_kind,
    probe_os,
)
