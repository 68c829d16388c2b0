from setuptools import setup, find_packages

setup(
    name="fade-slideshow",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "Pillow>=9.0.0",
        "PyYAML>=6.0",
        "PyQt6>=6.4.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "fade=fade.viewer.app:main",
        ],
    },
    python_requires=">=3.9",
)
