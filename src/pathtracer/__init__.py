"""Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders scenes of spheres lit by a sky gradient, with support for:
- Diffuse, metal and glass materials
- A thin-lens camera with depth of field
- Deterministic, per-sample seeded sampling
- Row-band parallel rendering with progressive accumulation
- PPM and PNG output

Subpackages:
    core: Rays, sampling, the color estimator and the render loop
    geometry: Sphere primitive and intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene tables, scene manager and preset scenes
    camera: Thin-lens camera with ray generation
    preview: Image quantisation and export
"""

__version__ = "0.1.0"
