"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with vertical field of view and depth of field

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Sample the lens aperture for depth-of-field blur
    - Apply anti-aliasing jitter for sub-pixel sampling

Ray generation uses normalized coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
