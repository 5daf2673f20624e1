"""Camera module for view and ray generation.

Components:
    thin_lens: Perspective camera with thin-lens depth of field

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Support look-at positioning with up vector
    - Sample the lens disk for depth of field

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import Camera, CameraConfig, make_camera

__all__ = [
    "Camera",
    "CameraConfig",
    "make_camera",
]
