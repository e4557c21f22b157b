#!/usr/bin/env python

from setuptools import setup

setup(
    name="mediatree",
    version="0.1.0",
    description="Browse a flat image store as a virtual directory tree",
    packages=["mediatree", "mediatree.api", "mediatree.client", "mediatree.namespace", "mediatree.objectstorage"],
    include_package_data=True,
    zip_safe=False,
    keywords=["API", "images", "cloudflare", "s3"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: Multimedia :: Graphics",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi[all]",
        "python-multipart",
        "python-dotenv",
        "httpx",
        "pydantic>=2",
        "pydantic-settings",
        "class-doc",
        "typing_extensions",
        "aiobotocore",
        "types-aiobotocore-s3",
        "async-lru",
        'uvicorn',
    ],
    extras_require={
        'dev': [
            'pytest',
            'pytest-httpx>=0.35',
            'anyio',
            'mypy',
            'flake8',
            'pre-commit',
        ]
    },
    entry_points={
        'console_scripts': [
            'mediatree = mediatree.__main__:main'
        ]
    },
)
