from setuptools import setup, find_packages

setup(
    name="relaychat",
    version="1.0.0",
    description="WebSocket chat relay with broadcast, private messages and replay history",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "colorama",
        "websockets>=13.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "relaychat = relaychat.cli:main",
        ],
    },
    python_requires=">=3.10",
)
