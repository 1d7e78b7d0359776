"""
Setup script for cadgeom.

Usage:
    pip install -e .           # Editable install
    pip install -e ".[dev]"    # With dev dependencies

Pure Python package, laid out under src/:
    - src/cadgeom/mathutils      geometry kernel
    - src/cadgeom/solvers        loft, plane fit, intersection solvers
    - src/cadgeom/render_engines indexed mesh export
"""

from setuptools import setup, find_packages


setup(
    name='cadgeom',
    version='0.1.0',
    description='Curve lofting, dominant-plane fitting and intersection marking for CAD hosts',
    python_requires='>=3.10',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=[
        'numpy',
    ],
    extras_require={
        'dev': [
            'pytest',
        ],
    },
)
