from setuptools import setup, find_packages

setup(
    name="mammogram-image-sets",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "pydicom>=3.0.0",
        "Pillow>=10.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "imageset-core=imageset_core.cli:main",
        ],
    },
)
