from setuptools import find_packages, setup

setup(
    name="fileguard",
    version="0.1.0",
    description="Run a command or log a line when a watched path changes (Linux inotify)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "python-daemon",
        "rich",
        "psutil"
    ],
    extras_require={
        "test": ["pytest"]
    },
    entry_points={
        "console_scripts": [
            "fileguard=fileguard.cli:main"
        ]
    },
)
