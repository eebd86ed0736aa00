from setuptools import find_packages, setup

setup(
    name="lexivec",
    version="0.1.0",
    description="Tiny persistent bag-of-letters vector store on SQLite",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["lexivec", "logging_utils"],
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.10",
)
