"""STL reader/writer for (N, 3, 3) float32 triangle arrays.

Binary layout (little-endian):
    80-byte header | uint32 count | count x (normal, v0, v1, v2 as 12 float32, uint16 attr)

Triangles are written in the order given; normals come from the winding.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np

from kinect2stl.steps.s02_depth_mesh._vertex import triangle_normals

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
COUNT_SIZE = 4

STL_RECORD = np.dtype([
    ("normal", "<f4", (3,)),
    ("v0", "<f4", (3,)),
    ("v1", "<f4", (3,)),
    ("v2", "<f4", (3,)),
    ("attr", "<u2"),
])

DEFAULT_HEADER = b"x" * HEADER_SIZE

_FACET_FMT = (
    "facet normal %e %e %e\n"
    "  outer loop\n"
    "    vertex %e %e %e\n"
    "    vertex %e %e %e\n"
    "    vertex %e %e %e\n"
    "  endloop\n"
    "endfacet"
)


@dataclass
class StlData:
    """Contents of a binary STL file."""

    header: bytes
    normals: np.ndarray  # (N, 3) float32
    triangles: np.ndarray  # (N, 3, 3) float32
    attributes: np.ndarray  # (N,) uint16

    @property
    def num_triangles(self) -> int:
        return len(self.triangles)


def binary_stl_size(num_triangles: int) -> int:
    return HEADER_SIZE + COUNT_SIZE + STL_RECORD.itemsize * num_triangles


def make_header(text: Union[str, bytes] = DEFAULT_HEADER) -> bytes:
    """Encode, then pad with spaces or truncate to exactly 80 bytes."""
    raw = text.encode("ascii") if isinstance(text, str) else bytes(text)
    if raw[:5].lower() == b"solid":
        logger.warning("Binary STL header starts with 'solid'; some readers will treat it as ASCII")
    return raw[:HEADER_SIZE].ljust(HEADER_SIZE, b" ")


def _as_triangles(tris) -> np.ndarray:
    tris = np.asarray(tris, dtype=np.float32)
    if tris.ndim != 3 or tris.shape[1:] != (3, 3):
        raise ValueError(f"Expected (N, 3, 3) triangles, got shape {tris.shape}")
    return tris


def write_binary_stl(
    tris,
    output_path: Path,
    header: Union[str, bytes] = DEFAULT_HEADER,
) -> Path:
    """Write triangles as binary STL, overwriting any existing file.

    Returns:
        Path to the written file.
    """
    tris = _as_triangles(tris)
    count = len(tris)
    if count > np.iinfo(np.uint32).max:
        raise ValueError(f"Too many triangles for binary STL: {count}")

    records = np.zeros(count, dtype=STL_RECORD)
    records["normal"] = triangle_normals(tris)
    records["v0"] = tris[:, 0]
    records["v1"] = tris[:, 1]
    records["v2"] = tris[:, 2]

    output_path = Path(output_path)
    with open(output_path, "wb") as f:
        f.write(make_header(header))
        f.write(struct.pack("<I", count))
        records.tofile(f)

    logger.info(f"Binary STL written: {output_path} ({count} triangles)")
    return output_path


def write_ascii_stl(tris, output_path: Path, solid_name: str = "kinect") -> Path:
    """Write triangles as ASCII STL."""
    tris = _as_triangles(tris)
    rows = np.concatenate(
        [triangle_normals(tris), tris.reshape(len(tris), 9)], axis=1
    ).astype(np.float64)

    output_path = Path(output_path)
    with open(output_path, "w", encoding="ascii", newline="\n") as f:
        f.write(f"solid {solid_name}\n")
        if len(rows):
            np.savetxt(f, rows, fmt=_FACET_FMT)
        f.write(f"endsolid {solid_name}\n")

    logger.info(f"ASCII STL written: {output_path} ({len(tris)} triangles)")
    return output_path


def read_binary_stl(path: Path) -> StlData:
    """Read a binary STL file written by write_binary_stl (or any conforming writer)."""
    with open(path, "rb") as f:
        header = f.read(HEADER_SIZE)
        count_bytes = f.read(COUNT_SIZE)
        if len(header) != HEADER_SIZE or len(count_bytes) != COUNT_SIZE:
            raise ValueError(f"Not a binary STL file (too short): {path}")
        (count,) = struct.unpack("<I", count_bytes)
        records = np.fromfile(f, dtype=STL_RECORD, count=count)

    if len(records) != count:
        raise ValueError(f"Truncated STL: header says {count} triangles, found {len(records)}")

    triangles = np.stack([records["v0"], records["v1"], records["v2"]], axis=1)
    return StlData(
        header=header,
        normals=np.ascontiguousarray(records["normal"]),
        triangles=triangles,
        attributes=np.ascontiguousarray(records["attr"]),
    )
