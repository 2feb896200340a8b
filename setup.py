import os

import setuptools

# Make sure that README.md decodes in environments that use the C locale
# (which implies ASCII), by explicitly giving the encoding.
with open(os.path.join(os.path.dirname(__file__), "README.md"), encoding="utf-8") as f:
    long_description = f.read()


setuptools.setup(
    name="zenox",
    # MAJOR.MINOR.PATCH, per http://semver.org
    version="0.1.0",
    description="Interactive project scaffolding with a raw-terminal line editor",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords="scaffolding, project, terminal, line-editor",
    license="ISC",
    py_modules=(
        "rawterm",
        "lineedit",
        "teardown",
        "zenox",
    ),
    entry_points={
        "console_scripts": ("zenox = zenox:main",),
    },
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.6",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Terminals",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
    ],
)
