import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="makeship",
    version="0.1.0",
    description="Build a game for several platforms and push the builds to itch.io with butler",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=["appdirs>=1.4.3", "toml>=0.10"],
    extras_require={"test": ["pytest>=6.0"]},
    entry_points={
        "console_scripts": ["makeship=makeship.makeship:main"],
    },
)
