from setuptools import find_packages, setup

setup(
    name="dynamo-stream-subscriber",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "pytest-cov",
            "moto[dynamodb]>=5.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "dynamo-stream-subscriber=dynamo_stream_subscriber.cli:main",
        ]
    },
    python_requires=">=3.10",
)
