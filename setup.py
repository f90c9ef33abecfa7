from setuptools import setup, find_packages

setup(
    name="DeerGrass",
    version="0.1",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    description="Deer-tree-grass-wildfire gridworld ecology with a two-phase step protocol: organisms act on the live field, births and deaths are reconciled after each sweep.",
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
