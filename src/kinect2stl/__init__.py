"""kinect2stl: turn a single Kinect depth frame into a printable STL solid."""

__version__ = "0.1.0"
