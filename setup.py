"""Package setup for second_order."""

from setuptools import setup, find_packages

setup(
    name="second-order",
    version="1.0.0",
    description="Scoped web crawler that flags second-order subdomain "
                "takeover candidates and harvests HTML signals",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "soupsieve>=2.5",
        "lxml>=5.0.0",
        "urllib3>=2.0.0",
    ],
    extras_require={
        "ui": [
            "tqdm>=4.66.0",
            "colorlog>=6.8.0",
        ],
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "second-order=second_order.cli:main",
        ],
    },
)
