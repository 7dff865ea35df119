import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pyIOTCentral",
    version="0.1.0",
    author="dhrone",
    author_email="ron@ritchey.org",
    description="Minimal device agent for Azure IoT Central: provisioning, heartbeat telemetry and desired-property handling",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/dhrone/pyIOTCentral",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=[
        "azure-iot-device>=2.12,<3",
        "python-dotenv>=1.0",
        "psutil>=5.9",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    python_requires=">=3.7",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
