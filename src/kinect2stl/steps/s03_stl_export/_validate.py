"""Post-export mesh checks via trimesh (optional dependency at runtime)."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _has_trimesh() -> bool:
    """Check if trimesh is available."""
    try:
        import trimesh  # noqa: F401
        return True
    except ImportError:
        return False


def validate_stl(path: Path) -> dict:
    """Reload an STL with vertex merging and report closure and orientation.

    Returns:
        Dict with watertight, winding_consistent, volume, euler_number.
    """
    import trimesh

    mesh = trimesh.load_mesh(str(path), file_type="stl")
    report = {
        "watertight": bool(mesh.is_watertight),
        "winding_consistent": bool(mesh.is_winding_consistent),
        "volume": float(mesh.volume),
        "euler_number": int(mesh.euler_number),
    }
    if not report["watertight"] or report["volume"] <= 0:
        logger.warning(f"Mesh check failed for {path.name}: {report}")
    else:
        logger.info(
            f"Mesh check: watertight, volume={report['volume']:.1f}, "
            f"euler={report['euler_number']}"
        )
    return report
