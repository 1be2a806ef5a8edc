from setuptools import setup
import os.path
import re

VERSION_RE = re.compile(r"""__version__ = ['"]([-a-z0-9.]+)['"]""")
BASE_PATH = os.path.dirname(__file__)


with open(os.path.join(BASE_PATH, "respool", "__init__.py")) as f:
    match = VERSION_RE.search(f.read())
    if match is None:
        raise RuntimeError("Unable to determine version.")
    version = match.group(1)


with open(os.path.join(BASE_PATH, "README.md")) as readme:
    long_description = readme.read()


setup(
    name="respool",
    description="A bounded asyncio resource pool with scoped checkout",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    version=version,
    packages=["respool"],
    python_requires=">=3.8",
    install_requires=["aiobotocore>=2.0.0", "async_timeout>=4.0"],
    extras_require={
        "test": ["pytest", "pytest-asyncio", "pytest-cov", "coverage"],
    },
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Framework :: AsyncIO",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
    ],
)
