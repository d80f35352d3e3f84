from setuptools import setup, find_packages
import os


with open(os.path.join("memorm", "version.py")) as f:
    version = f.read().split("=")[1].strip().strip("'").strip('"')

with open("requirements.txt", "r") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.strip().startswith("#")]


setup(
    name='memorm',
    version=version,
    packages=find_packages(where=".", include=["memorm", "memorm.*"]),
    description="In-memory object-relational mapping to simulate a backend data model in tests",
    author="Memorm development team",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    install_requires=requirements,
    classifiers=[
        "Programming Language :: Python",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Testing",
    ],
    python_requires=">=3.7",
    extras_require={
        "test": [
            'pytest',
            'pytest-cov',
        ]
    },
    include_package_data=True
)
