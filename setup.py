import os

import setuptools

# Make sure that README.md decodes in environments that use the C locale
# (which implies ASCII), by explicitly giving the encoding.
with open(os.path.join(os.path.dirname(__file__), "README.md"), encoding="utf-8") as f:
    long_description = f.read()


setuptools.setup(
    name="rawprompt",
    # MAJOR.MINOR.PATCH, per http://semver.org
    version="0.3.0",
    description="Interactive terminal prompts with validation, drawn inline",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords="prompt, terminal, cli, input, password, select, confirm",
    license="ISC",
    py_modules=(
        "promptterm",
        "rawprompt",
        "rawask",
    ),
    entry_points={
        "console_scripts": ("rawask = rawask:main",),
    },
    install_requires=("grapheme>=0.6.0",),
    extras_require={
        "test": ("pytest",),
    },
    python_requires=">=3.7",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Environment :: Console",
        "Topic :: Software Development :: User Interfaces",
        "Topic :: Terminals",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Operating System :: POSIX",
        "Operating System :: Microsoft :: Windows",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
    ],
)
